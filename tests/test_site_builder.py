"""
Test suite for SiteBuilder.

Collections resolve before rendering; a failing provider fails the build and
nothing is written.
"""

from __future__ import annotations

import asyncio

import pytest

from adapters.site_builder import CollectionApi, SiteBuilder
from core.errors import BuildError


@pytest.fixture
def site_dir(tmp_path):
    src = tmp_path / "site"
    src.mkdir()
    (src / "_base.html").write_text("<main>{% block content %}{% endblock %}</main>", encoding="utf-8")
    (src / "index.njk").write_text(
        '{% extends "_base.html" %}{% block content %}'
        "{% for n in collections.numbers %}[{{ n }}]{% endfor %}{{ site_name }}"
        "{% endblock %}",
        encoding="utf-8",
    )
    (src / "about").mkdir()
    (src / "about" / "index.html").write_text("<p>{{ collections.numbers | length }}</p>", encoding="utf-8")
    return src


@pytest.fixture
def builder(site_dir, tmp_path) -> SiteBuilder:
    return SiteBuilder(input_dir=site_dir, output_dir=tmp_path / "dist")


class TestSiteBuilderRender:
    """Rendering with resolved collections."""

    @pytest.mark.asyncio
    async def test_build_renders_templates_with_collections(self, builder, tmp_path):
        async def numbers(collections: CollectionApi):
            return [1, 2, 3]

        builder.add_collection("numbers", numbers)
        builder.add_global_data("site_name", "Team")

        report = await builder.build()

        index = (tmp_path / "dist" / "index.html").read_text(encoding="utf-8")
        assert index == "<main>[1][2][3]Team</main>"
        assert (tmp_path / "dist" / "about" / "index.html").read_text(encoding="utf-8") == "<p>3</p>"
        assert report.collection_sizes == {"numbers": 3}
        assert len(report.written) == 2

    def test_partials_are_not_rendered_on_their_own(self, builder, site_dir):
        names = [p.relative_to(site_dir).as_posix() for p in builder.discover_templates()]

        assert names == ["about/index.html", "index.njk"]

    def test_collection_api_filters_by_glob(self, builder, site_dir):
        api = CollectionApi(input_dir=site_dir, templates=builder.discover_templates())

        assert [p.name for p in api.get_filtered_by_glob("about/*")] == ["index.html"]

    def test_duplicate_collection_is_rejected(self, builder):
        async def empty(collections):
            return []

        builder.add_collection("x", empty)
        with pytest.raises(ValueError):
            builder.add_collection("x", empty)

    @pytest.mark.asyncio
    async def test_missing_input_dir_fails(self, tmp_path):
        builder = SiteBuilder(input_dir=tmp_path / "nope", output_dir=tmp_path / "dist")

        with pytest.raises(BuildError, match="Input directory not found"):
            await builder.build()


class TestSiteBuilderCollections:
    """Provider scheduling and failure propagation."""

    @pytest.mark.asyncio
    async def test_providers_run_concurrently(self, builder):
        started: list[str] = []
        release = asyncio.Event()

        async def slow(collections):
            started.append("slow")
            await release.wait()
            return ["s"]

        async def fast(collections):
            started.append("fast")
            release.set()
            return ["f"]

        builder.add_collection("slow", slow)
        builder.add_collection("fast", fast)

        await asyncio.wait_for(builder.build(), timeout=5)

        assert started == ["slow", "fast"]

    @pytest.mark.asyncio
    async def test_failing_provider_fails_build_and_writes_nothing(self, builder, tmp_path):
        async def numbers(collections):
            raise RuntimeError("remote down")

        builder.add_collection("numbers", numbers)

        with pytest.raises(BuildError, match="Collection 'numbers' failed") as exc_info:
            await builder.build()

        assert isinstance(exc_info.value.__cause__, RuntimeError)
        assert not (tmp_path / "dist").exists()

    @pytest.mark.asyncio
    async def test_template_error_fails_build(self, builder, site_dir, tmp_path):
        (site_dir / "broken.html").write_text("{% for %}", encoding="utf-8")

        async def numbers(collections):
            return []

        builder.add_collection("numbers", numbers)

        with pytest.raises(BuildError, match="broken.html"):
            await builder.build()
        assert not (tmp_path / "dist").exists()

    @pytest.mark.asyncio
    async def test_failing_provider_cancels_the_others(self, builder):
        cancelled = asyncio.Event()

        async def hanging(collections):
            try:
                await asyncio.Event().wait()
            except asyncio.CancelledError:
                cancelled.set()
                raise
            return []

        async def failing(collections):
            await asyncio.sleep(0)
            raise RuntimeError("remote down")

        builder.add_collection("hanging", hanging)
        builder.add_collection("failing", failing)

        with pytest.raises(BuildError, match="Collection 'failing' failed"):
            await asyncio.wait_for(builder.build(), timeout=5)

        assert cancelled.is_set()


class TestSiteBuilderOutput:
    """Writing the rendered pages."""

    @pytest.mark.asyncio
    async def test_write_failure_raises_build_error_and_removes_partial_output(self, builder, tmp_path):
        async def numbers(collections):
            return [1]

        builder.add_collection("numbers", numbers)
        # about/index.html is written first; dist/index.html is blocked by a directory.
        (tmp_path / "dist" / "index.html").mkdir(parents=True)

        with pytest.raises(BuildError, match="Could not write output") as exc_info:
            await builder.build()

        assert isinstance(exc_info.value.__cause__, OSError)
        assert not (tmp_path / "dist" / "about" / "index.html").exists()
