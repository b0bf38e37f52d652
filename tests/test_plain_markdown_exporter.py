"""Tests for the plain Markdown export of canonical documents."""

import pytest
import yaml

from exporters.plain_markdown_exporter import PlainMarkdownExporter, dump_front_matter, split_front_matter

CANONICAL = '''---
title: "Hello World"
date: 2021-03-04
excerpt: "A short intro"
categories:
  - Python
featuredImage: /images/posts/hello-world/cover.png
---

Intro

<YouTube id="abc123" />

<Video id="vid9" />

<Tweet id="42" />

<GitHubStats repo="octo/repo" />

<Image src="/images/posts/hello-world/photo.jpg" alt="A &quot;nice&quot; photo" caption={<>The caption</>} />

<Notice type="info">
Heads up
second line
</Notice>

![inline](/images/x.png)

```js {1,3}
<YouTube id="keep" />
```
'''


@pytest.fixture
def exporter(config, tmp_path):
    return PlainMarkdownExporter(config, tmp_path)


@pytest.fixture
def published(exporter, tmp_path):
    posts = tmp_path / 'src' / 'content' / 'posts'
    posts.mkdir(parents=True)
    (posts / 'hello-world.mdx').write_text(CANONICAL, encoding='utf-8')
    return exporter.export('hello-world')


class TestLookup:
    """Finding the document for a slug."""

    def test_unknown_slug(self, exporter):
        assert exporter.export('missing') is None

    @pytest.mark.parametrize('slug', ['', '../secrets', 'a/b', '.hidden'])
    def test_unsafe_slugs_rejected(self, exporter, slug):
        assert exporter.find_document(slug) is None

    def test_falls_back_to_md_extension(self, exporter, tmp_path):
        posts = tmp_path / 'src' / 'content' / 'posts'
        posts.mkdir(parents=True)
        (posts / 'legacy.md').write_text('---\ntitle: Legacy\n---\n\nOld', encoding='utf-8')

        assert exporter.find_document('legacy') == posts / 'legacy.md'


class TestFrontMatter:
    """Quoted front matter dialect."""

    def test_front_matter_lines(self, published):
        header = published.split('---\n')[1]

        assert header.splitlines() == [
            'title: "Hello World"',
            'date: "2021-03-04"',
            'description: "A short intro"',
            'author: ""',
            'tags:',
            '- "Python"',
            'url: "https://example.com/hello-world"',
            'image: "/api/assets?path=/images/posts/hello-world/cover.png"',
        ]

    def test_front_matter_parses_back(self, published):
        data, _ = split_front_matter(published)

        assert data['tags'] == ['Python']
        assert data['date'] == '2021-03-04'

    def test_optional_keys_omitted(self, exporter):
        text = exporter.convert('---\ntitle: Bare\n---\n\nBody', 'bare')

        assert 'description:' not in text
        assert 'image:' not in text
        assert 'tags: []' in text

    def test_configured_author_and_site(self, config, tmp_path):
        config['export']['site_url'] = 'https://blog.test/'
        config['export']['author'] = 'Jo Writer'

        text = PlainMarkdownExporter(config, tmp_path).convert('---\ntitle: T\n---\n\nB', 'post')

        assert 'author: "Jo Writer"\n' in text
        assert 'url: "https://blog.test/post"\n' in text

    def test_dump_keeps_key_order(self):
        dumped = dump_front_matter({'z': 'last', 'a': 'first'})

        assert dumped == 'z: "last"\na: "first"\n'
        assert yaml.safe_load(dumped) == {'z': 'last', 'a': 'first'}

    def test_invalid_front_matter_treated_as_body(self):
        data, body = split_front_matter('---\n: [unclosed\n---\n\nText')

        assert data == {}
        assert body.endswith('Text')

    def test_no_front_matter(self):
        assert split_front_matter('Just text') == ({}, 'Just text')


class TestBody:
    """Embed elements become plain links."""

    def test_embeds_rewritten(self, published):
        assert '[Watch on YouTube](https://www.youtube.com/watch?v=abc123)' in published
        assert '[Watch the video](https://iframe.videodelivery.net/vid9)' in published
        assert '[View on X](https://x.com/i/status/42)' in published
        assert '[octo/repo](https://github.com/octo/repo)' in published

    def test_image_with_caption(self, published):
        assert (
            '![A "nice" photo](/api/assets?path=/images/posts/hello-world/photo.jpg)\n*The caption*'
        ) in published

    def test_notice_becomes_blockquote(self, published):
        assert '> Heads up\n> second line' in published
        assert '<Notice' not in published

    def test_markdown_image_resolved(self, published):
        assert '![inline](/api/assets?path=/images/x.png)' in published

    def test_code_fence_untouched_and_meta_reduced(self, published):
        assert published.endswith('```js\n<YouTube id="keep" />\n```\n')
        assert '{1,3}' not in published

    def test_absolute_urls_pass_through(self, exporter):
        body = '<Image src="https://cdn.example.com/a.png" alt="a" />\n\n![b](https://cdn.example.com/b.png)'

        converted = exporter.convert_body(body)

        assert converted == '![a](https://cdn.example.com/a.png)\n\n![b](https://cdn.example.com/b.png)'

    def test_element_without_id_dropped(self, exporter):
        assert exporter.convert_body('Before\n\n<YouTube />\n\nAfter') == 'Before\n\nAfter'

    def test_resolve_asset_url_quotes_path(self, exporter):
        assert exporter.resolve_asset_url('/images/my photo.png') == '/api/assets?path=/images/my%20photo.png'
        assert exporter.resolve_asset_url('//cdn.example.com/a.png') == '//cdn.example.com/a.png'
