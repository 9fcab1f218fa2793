"""Tests for local filename derivation."""

from solidcli.client.sync import derive_filename, safe_filename, slugify


class TestSlugify:
    def test_basic(self) -> None:
        assert slugify("About Us & Team!") == "about-us-team"

    def test_truncates_to_60(self) -> None:
        assert len(slugify("word " * 30)) == 60

    def test_only_symbols(self) -> None:
        assert slugify("!!!") == ""


class TestSafeFilename:
    def test_keeps_plain_slug(self) -> None:
        assert safe_filename("about-us") == "about-us"

    def test_collapses_path_separators(self) -> None:
        assert safe_filename("blog/2025/launch") == "blog-2025-launch"

    def test_strips_leading_dots(self) -> None:
        assert safe_filename("../etc") == "etc"


class TestDeriveFilename:
    """Tests for derive_filename."""

    def test_prefers_slug(self) -> None:
        used: set[str] = set()
        name = derive_filename(
            slug="about", label="About Us", fallback="page-1",
            extension=".json", used=used, resource_id=1,
        )
        assert name == "about.json"
        assert used == {"about.json"}

    def test_slugifies_label_without_slug(self) -> None:
        name = derive_filename(
            slug=None, label="Return Policy", fallback="entry-5",
            extension=".md", used=set(), resource_id=5,
        )
        assert name == "return-policy.md"

    def test_fallback_uses_id(self) -> None:
        name = derive_filename(
            slug="", label="???", fallback="product-9",
            extension=".json", used=set(), resource_id=9,
        )
        assert name == "product-9.json"

    def test_collision_appends_id(self) -> None:
        """Two resources deriving the same name do not overwrite each other."""
        used: set[str] = set()
        first = derive_filename(
            slug=None, label="FAQ", fallback="entry-1",
            extension=".md", used=used, resource_id=1,
        )
        second = derive_filename(
            slug=None, label="faq", fallback="entry-2",
            extension=".md", used=used, resource_id=2,
        )
        assert (first, second) == ("faq.md", "faq-2.md")

    def test_suffixed_name_already_taken(self) -> None:
        """A slug that already looks like a suffixed name is never reused."""
        used: set[str] = set()
        names = [
            derive_filename(
                slug=slug, label=None, fallback=f"page-{page_id}",
                extension=".json", used=used, resource_id=page_id,
            )
            for slug, page_id in [("about-5", 9), ("about", 1), ("about", 5)]
        ]
        assert names == ["about-5.json", "about.json", "about-5-2.json"]
        assert len(used) == 3
