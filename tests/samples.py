"""Sample feed documents and fake HTTP transports shared by the tests."""

import asyncio

import httpx


ATOM_FEED = b"""<?xml version="1.0" encoding="utf-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
  <title>Example Atom</title>
  <id>urn:example:atom</id>
  <updated>2024-01-02T00:00:00Z</updated>
  <entry>
    <id>u1</id>
    <title type="text">First entry</title>
    <updated>2024-01-02T00:00:00Z</updated>
    <link rel="self" href="http://x/self/1"/>
    <link rel="alternate" href="http://x/1"/>
    <author><name>Ann</name></author>
    <summary type="text">Entry summary</summary>
  </entry>
  <entry>
    <id>u2</id>
    <title>Second entry</title>
    <published>2023-12-30T08:00:00Z</published>
    <link href="http://x/2"/>
    <content type="text">Only content here</content>
  </entry>
</feed>
"""

RSS_FEED = b"""<?xml version="1.0" encoding="utf-8"?>
<rss version="2.0" xmlns:dc="http://purl.org/dc/elements/1.1/">
  <channel>
    <title>Example RSS</title>
    <link>http://y/</link>
    <description>Example</description>
    <item>
      <title>No guid</title>
      <link>http://y/1</link>
      <description>Item one</description>
      <pubDate>Mon, 01 Jan 2024 12:00:00 GMT</pubDate>
    </item>
    <item>
      <title>With guid</title>
      <link>http://y/2</link>
      <guid isPermaLink="false">guid-2</guid>
      <dc:creator>Bob</dc:creator>
      <pubDate>Tue, 02 Jan 2024 12:00:00 GMT</pubDate>
    </item>
    <item>
      <title>Undated</title>
      <link>http://y/3</link>
    </item>
  </channel>
</rss>
"""

RDF_FEED = b"""<?xml version="1.0" encoding="utf-8"?>
<rdf:RDF xmlns:rdf="http://www.w3.org/1999/02/22-rdf-syntax-ns#"
         xmlns="http://purl.org/rss/1.0/"
         xmlns:dc="http://purl.org/dc/elements/1.1/">
  <channel rdf:about="http://z/">
    <title>Example RDF</title>
    <link>http://z/</link>
    <description>Example</description>
  </channel>
  <item rdf:about="http://z/1">
    <title>RDF item</title>
    <link>http://z/1</link>
    <dc:creator>Zed</dc:creator>
    <dc:date>2024-03-01T10:00:00Z</dc:date>
    <description>From RDF</description>
  </item>
</rdf:RDF>
"""


def rss_document(*items: tuple[str, str | None]) -> bytes:
    """Build an RSS 2.0 document from (link, pubDate) pairs."""
    parts = []
    for link, pub_date in items:
        date = f"<pubDate>{pub_date}</pubDate>" if pub_date else ""
        parts.append(f"<item><title>{link}</title><link>{link}</link>{date}</item>")
    body = "".join(parts)
    return (
        f'<?xml version="1.0"?><rss version="2.0"><channel><title>t</title>'
        f"<link>http://feed/</link><description>d</description>{body}</channel></rss>"
    ).encode("utf-8")


def make_transport(routes: dict, delays: dict | None = None) -> httpx.MockTransport:
    """MockTransport serving ``routes`` (url -> bytes | status int), 404 otherwise.

    URLs in ``delays`` sleep that many seconds before answering.
    """
    delays = delays or {}

    async def handler(request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        if url in delays:
            await asyncio.sleep(delays[url])
        payload = routes.get(url)
        if payload is None:
            return httpx.Response(404)
        if isinstance(payload, int):
            return httpx.Response(payload)
        return httpx.Response(200, content=payload)

    return httpx.MockTransport(handler)

