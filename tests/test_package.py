import pytest
from pydantic import ValidationError

from gitsource.package import PackageDescriptor


class TestPackageDescriptor:
    @pytest.mark.short
    def test_preferred_url_defaults_to_first_candidate(self):
        package = PackageDescriptor(source_urls=["https://a.example/r", "https://b.example/r"])

        assert package.source_url == "https://a.example/r"

    @pytest.mark.short
    def test_candidates_default_to_preferred_url(self):
        package = PackageDescriptor(source_url="https://a.example/r")

        assert package.source_urls == ["https://a.example/r"]

    @pytest.mark.short
    def test_blank_urls_dropped(self):
        package = PackageDescriptor(source_urls=[" https://a.example/r ", "", "  "])

        assert package.source_urls == ["https://a.example/r"]

    @pytest.mark.short
    def test_pretty_version_defaults_to_version(self):
        assert PackageDescriptor(version="1.0.0.0").pretty_version == "1.0.0.0"

    @pytest.mark.short
    def test_full_pretty_version(self):
        sha = "abcdef0123456789abcdef0123456789abcdef01"

        assert PackageDescriptor(pretty_version="dev-main", source_reference=sha).full_pretty_version == "dev-main abcdef0"
        assert PackageDescriptor(pretty_version="1.0.0", source_reference=sha).full_pretty_version == "1.0.0"

    @pytest.mark.short
    def test_frozen(self):
        package = PackageDescriptor(name="org/repo")

        with pytest.raises(ValidationError):
            package.name = "other"
