"""Tests for the pipeline data models."""

import unittest

from models import (
    AttachmentIndex,
    ExportItem,
    FetchOutcome,
    FetchStatus,
    ItemResult,
    OutputDocument,
    needs_quoting,
    plain_or_quoted,
    quote_scalar,
)


class TestFetchOutcome(unittest.TestCase):
    """Error is present exactly when the fetch failed."""

    def test_failed_requires_error(self):
        with self.assertRaises(ValueError):
            FetchOutcome('https://e.com/a.png', '/a.png', FetchStatus.FAILED)

    def test_success_rejects_error(self):
        with self.assertRaises(ValueError):
            FetchOutcome('https://e.com/a.png', '/a.png', FetchStatus.FETCHED, error='oops')

    def test_to_dict(self):
        outcome = FetchOutcome('https://e.com/a.png', '/a.png', FetchStatus.ALREADY_PRESENT)

        self.assertTrue(outcome.succeeded)
        self.assertEqual(outcome.to_dict()['status'], 'already_present')

    def test_item_result_failed_assets(self):
        failed = FetchOutcome('u1', '/1', FetchStatus.FAILED, error='HTTP 500')
        ok = FetchOutcome('u2', '/2', FetchStatus.FETCHED)

        result = ItemResult('slug', 'Title', 'written', fetch_outcomes=[ok, failed])

        self.assertEqual(result.failed_assets, [failed])


class TestAttachmentIndex(unittest.TestCase):
    """Read-only id to URL mapping."""

    def test_first_pair_wins(self):
        index = AttachmentIndex.from_pairs([('1', 'first'), ('2', 'other'), ('1', 'second')])

        self.assertEqual(index.resolve('1'), 'first')
        self.assertEqual(len(index), 2)
        self.assertEqual(sorted(index), ['1', '2'])

    def test_read_only(self):
        index = AttachmentIndex({'1': 'url'})

        with self.assertRaises(TypeError):
            index._entries['2'] = 'other'
        self.assertFalse(hasattr(index, '__setitem__'))

    def test_resolve_missing(self):
        index = AttachmentIndex()

        self.assertIsNone(index.resolve('1'))
        self.assertIsNone(index.resolve(None))


class TestExportItem(unittest.TestCase):

    def test_flags(self):
        item = ExportItem(title='t', raw_body='', status='publish', kind='post')

        self.assertTrue(item.is_published)
        self.assertTrue(item.is_post)
        self.assertFalse(item.is_attachment)
        self.assertEqual(item.to_dict()['body_length'], 0)


class TestOutputDocument(unittest.TestCase):
    """Front matter rendering."""

    def test_unknown_key_rejected(self):
        with self.assertRaises(ValueError):
            OutputDocument('s', {'title': 't', 'tags': ['x']}, 'body')

    def test_fixed_key_order(self):
        document = OutputDocument('s', {
            'featuredImage': '/images/posts/s/a.png',
            'categories': ['B', 'A'],
            'title': 'T',
            'date': '2020-01-01',
        }, 'body')

        self.assertEqual(
            [key for key, _ in document.ordered_front_matter()],
            ['title', 'date', 'categories', 'featuredImage']
        )

    def test_empty_body(self):
        text = OutputDocument('s', {'title': 'T'}, '  \n').render()

        self.assertEqual(text, '---\ntitle: "T"\n---\n\n')


class TestScalarQuoting(unittest.TestCase):
    """YAML scalar quoting helpers."""

    def test_quote_scalar_escapes(self):
        self.assertEqual(quote_scalar('a "b" \\c'), '"a \\"b\\" \\\\c"')

    def test_needs_quoting(self):
        for value in ['', ' padded', 'key: value', 'trailing:', '#hash', 'a #b',
                      '- dash', '[list]', 'true', 'No', 'null', '42', '3.14', 'line\nbreak']:
            with self.subTest(value=value):
                self.assertTrue(needs_quoting(value))

    def test_plain_values(self):
        for value in ['Python', 'Machine Learning', 'C++', '2021-03-04', '/images/posts/a.png', 'v1.2']:
            with self.subTest(value=value):
                self.assertFalse(needs_quoting(value))
                self.assertEqual(plain_or_quoted(value), value)


if __name__ == '__main__':
    unittest.main()
