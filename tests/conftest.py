"""Shared fixtures: a small WordPress export, a fake HTTP session and config."""

import copy

import pytest
import requests

from config_loader import DEFAULT_CONFIG


SAMPLE_EXPORT = '''<?xml version="1.0" encoding="UTF-8" ?>
<rss version="2.0"
    xmlns:excerpt="http://wordpress.org/export/1.2/excerpt/"
    xmlns:content="http://purl.org/rss/1.0/modules/content/"
    xmlns:wfw="http://wellformedweb.org/CommentAPI/"
    xmlns:dc="http://purl.org/dc/elements/1.1/"
    xmlns:wp="http://wordpress.org/export/1.2/">
<channel>
  <title>Example Blog</title>
  <link>https://blog.example.com</link>
  <item>
    <title>Hello World</title>
    <link>https://blog.example.com/hello-world/</link>
    <pubDate>Thu, 04 Mar 2021 10:11:12 +0000</pubDate>
    <guid isPermaLink="false">https://blog.example.com/?p=10</guid>
    <content:encoded><![CDATA[<!-- wp:paragraph -->
<p>Hello <strong>world</strong></p>
<!-- /wp:paragraph -->

<!-- wp:image {"id":21} -->
<figure class="wp-block-image"><img src="https://blog.example.com/wp-content/uploads/2021/03/photo.jpg?w=800" alt="Photo"/></figure>
<!-- /wp:image -->]]></content:encoded>
    <excerpt:encoded><![CDATA[A short intro]]></excerpt:encoded>
    <wp:post_id>10</wp:post_id>
    <wp:post_date><![CDATA[2021-03-04 10:11:12]]></wp:post_date>
    <wp:post_name><![CDATA[hello-world]]></wp:post_name>
    <wp:status><![CDATA[publish]]></wp:status>
    <wp:post_type><![CDATA[post]]></wp:post_type>
    <category domain="category" nicename="python"><![CDATA[Python]]></category>
    <category domain="category" nicename="uncategorized"><![CDATA[Uncategorized]]></category>
    <category domain="post_tag" nicename="misc"><![CDATA[misc]]></category>
    <category domain="category" nicename="python"><![CDATA[Python]]></category>
    <wp:postmeta>
      <wp:meta_key><![CDATA[_edit_last]]></wp:meta_key>
      <wp:meta_value><![CDATA[1]]></wp:meta_value>
    </wp:postmeta>
    <wp:postmeta>
      <wp:meta_key><![CDATA[_thumbnail_id]]></wp:meta_key>
      <wp:meta_value><![CDATA[21]]></wp:meta_value>
    </wp:postmeta>
  </item>
  <item>
    <title>Draft Post</title>
    <content:encoded><![CDATA[<p>Not ready</p>]]></content:encoded>
    <wp:post_id>11</wp:post_id>
    <wp:status><![CDATA[draft]]></wp:status>
    <wp:post_type><![CDATA[post]]></wp:post_type>
  </item>
  <item>
    <title>About</title>
    <content:encoded><![CDATA[<p>A page</p>]]></content:encoded>
    <wp:post_id>12</wp:post_id>
    <wp:post_name><![CDATA[about]]></wp:post_name>
    <wp:status><![CDATA[publish]]></wp:status>
    <wp:post_type><![CDATA[page]]></wp:post_type>
  </item>
  <item>
    <title>cover</title>
    <guid isPermaLink="false">https://blog.example.com/wp-content/uploads/2021/03/cover.png</guid>
    <content:encoded><![CDATA[]]></content:encoded>
    <wp:post_id>21</wp:post_id>
    <wp:status><![CDATA[inherit]]></wp:status>
    <wp:post_type><![CDATA[attachment]]></wp:post_type>
    <wp:attachment_url><![CDATA[https://blog.example.com/wp-content/uploads/2021/03/cover.png]]></wp:attachment_url>
  </item>
  <item>
    <title>manual</title>
    <guid isPermaLink="false">https://blog.example.com/?attachment_id=22</guid>
    <wp:post_id>22</wp:post_id>
    <wp:status><![CDATA[inherit]]></wp:status>
    <wp:post_type><![CDATA[attachment]]></wp:post_type>
    <wp:attachment_url><![CDATA[https://blog.example.com/wp-content/uploads/manual.pdf]]></wp:attachment_url>
  </item>
  <item>
    <title>Second Post: Part 2</title>
    <pubDate>Fri, 05 Mar 2021 08:00:00 +0000</pubDate>
    <content:encoded><![CDATA[<p>Plain</p>]]></content:encoded>
    <wp:post_id>13</wp:post_id>
    <wp:post_date><![CDATA[0000-00-00 00:00:00]]></wp:post_date>
    <wp:status><![CDATA[publish]]></wp:status>
    <wp:post_type><![CDATA[post]]></wp:post_type>
  </item>
</channel>
</rss>
'''

PHOTO_URL = 'https://blog.example.com/wp-content/uploads/2021/03/photo.jpg'
COVER_URL = 'https://blog.example.com/wp-content/uploads/2021/03/cover.png'


class FakeResponse:
    """Minimal stand-in for requests.Response."""

    def __init__(self, status_code=200, content=b'', headers=None):
        self.status_code = status_code
        self.content = content
        self.headers = headers or {}
        self.closed = False

    def close(self):
        self.closed = True


class FakeSession:
    """
    Routes GET requests to canned responses.

    A route value may be a FakeResponse or an exception instance to raise.
    Unknown URLs answer 404.
    """

    def __init__(self, routes=None):
        self.routes = dict(routes or {})
        self.headers = {}
        self.calls = []

    def get(self, url, timeout=None, allow_redirects=True):
        self.calls.append({'url': url, 'timeout': timeout, 'allow_redirects': allow_redirects})
        route = self.routes.get(url)
        if isinstance(route, Exception):
            raise route
        if route is None:
            return FakeResponse(404)
        return route


def redirect(location, status_code=302):
    return FakeResponse(status_code, headers={'Location': location})


@pytest.fixture
def sample_export():
    return SAMPLE_EXPORT


@pytest.fixture
def fake_session():
    return FakeSession({
        PHOTO_URL: FakeResponse(200, b'photo-bytes'),
        COVER_URL: FakeResponse(200, b'cover-bytes'),
    })


@pytest.fixture
def config(tmp_path):
    """Default configuration rooted at a temporary project directory."""
    cfg = copy.deepcopy(DEFAULT_CONFIG)
    cfg['paths']['project_root'] = str(tmp_path)
    cfg['fetch']['progress_bars'] = False
    return cfg


@pytest.fixture
def connection_error():
    return requests.ConnectionError('connection refused')
