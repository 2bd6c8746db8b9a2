# tests/test_document.py

"""Tests for selector resolution over parsed markup."""

import unittest

from src.extraction.document import DocumentQueryAdapter

PAGE = """
<html><head><style>.price { width: 100px; }</style></head>
<body>
  <script>var price = 999.99;</script>
  <div id="main">
    <span class="price">10.00</span>
    <span class="old-price">12.00</span>
    <span class="name" data-price="11.00">Kettle</span>
  </div>
</body></html>
"""


class TestDocumentQueryAdapter(unittest.TestCase):
    """Verify the selector lookup chain."""

    def setUp(self) -> None:
        self.doc = DocumentQueryAdapter(PAGE)

    def test_scripts_and_styles_removed(self) -> None:
        text = self.doc.body_text()
        self.assertNotIn("999.99", text)
        self.assertNotIn("width", text)
        self.assertIn("Kettle", text)

    def test_resolve_by_id(self) -> None:
        nodes = self.doc.resolve("#main")
        self.assertEqual(len(nodes), 1)
        self.assertEqual(nodes[0].name, "div")

    def test_resolve_by_class_without_duplicates(self) -> None:
        nodes = self.doc.resolve(".price")
        self.assertEqual(len(nodes), 1)
        self.assertEqual(nodes[0].get_text(), "10.00")

    def test_resolve_attribute_presence(self) -> None:
        nodes = self.doc.resolve("[data-price]")
        self.assertEqual([n.get_text() for n in nodes], ["Kettle"])

    def test_resolve_attribute_substring(self) -> None:
        nodes = self.doc.resolve('[class*="price"]')
        texts = sorted(n.get_text() for n in nodes)
        self.assertEqual(texts, ["10.00", "12.00"])

    def test_resolve_by_tag(self) -> None:
        self.assertEqual(len(self.doc.resolve("span")), 3)

    def test_invalid_selector_yields_nothing(self) -> None:
        self.assertEqual(self.doc.resolve("!!!"), [])
        self.assertEqual(self.doc.resolve(""), [])

    def test_descendant_selector_without_match(self) -> None:
        doc = DocumentQueryAdapter(
            '<div class="card"><span class="price">25.00</span></div>'
        )
        self.assertEqual(doc.resolve(".card .sale"), [])
        self.assertEqual(len(doc.resolve(".card .price")), 1)

    def test_compound_class_without_match(self) -> None:
        doc = DocumentQueryAdapter('<span class="a-price">25.00</span>')
        self.assertEqual(doc.resolve(".a-price.a-text-price"), [])

    def test_child_selector_without_match(self) -> None:
        doc = DocumentQueryAdapter("<div><em>qty 7</em></div>")
        self.assertEqual(doc.resolve("div > span"), [])
        self.assertEqual(
            [n.get_text() for n in doc.resolve("div > em")], ["qty 7"],
        )

    def test_tag_qualified_attribute(self) -> None:
        nodes = self.doc.resolve("div[data-price]")
        self.assertEqual(nodes, [])
        self.assertEqual(len(self.doc.resolve("span[data-price]")), 1)

    def test_body_text_without_body(self) -> None:
        doc = DocumentQueryAdapter("<p>42.00</p>")
        self.assertIn("42.00", doc.body_text())


if __name__ == "__main__":
    unittest.main()
