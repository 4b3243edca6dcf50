"""Integration tests running the whole pipeline against a mocked npm registry."""

import csv
import io
import json
from pathlib import Path
from urllib.parse import unquote

import httpx
import pytest

from peercompat.config import PeerCompatConfig, RegistryConfig
from peercompat.core.models import ScanOptions
from peercompat.engine.checker import PackageChecker
from peercompat.engine.pool import WorkerPool
from peercompat.engine.progress import ProgressPublisher, ProgressTracker
from peercompat.manifest import load_manifest
from peercompat.migration_links import MigrationLinkResolver
from peercompat.registry.client import NpmRegistryClient
from peercompat.report import render_csv

# name -> (dist-tags.latest, {version: peerDependencies}, latest manifest extras, packument extras)
REGISTRY: dict[str, tuple[str, dict[str, dict[str, str]], dict, dict]] = {
    "@ngx-translate/core": (
        "16.0.3",
        {
            "16.0.3": {"@angular/core": ">=16", "@angular/common": ">=16"},
            "15.0.0": {"@angular/core": ">=16", "@angular/common": ">=16"},
            "14.0.0": {"@angular/core": ">=13.0.0 <16.0.0"},
            "13.0.0": {"@angular/core": ">=13.0.0 <16.0.0"},
            "16.1.0-beta.0": {"@angular/core": ">=16"},
        },
        {},
        {},
    ),
    "rxjs": (
        "7.8.1",
        {"7.8.1": {}, "7.8.0": {}, "6.6.7": {}},
        {"keywords": ["Rx", "RxJS"]},
        {"homepage": "https://rxjs.dev"},
    ),
    "chart.js": (
        "4.4.0",
        {"4.4.0": {}, "3.9.1": {}},
        {"keywords": ["canvas", "charts"]},
        {"repository": {"type": "git", "url": "git+https://github.com/chartjs/Chart.js.git"}},
    ),
    "ngx-old-thing": (
        "1.0.0",
        {"1.0.0": {"@angular/core": "^12.0.0"}},
        {},
        {},
    ),
}


def registry_handler(request: httpx.Request) -> httpx.Response:
    """Answer packument and version-manifest requests from ``REGISTRY``."""
    path = unquote(request.url.path).lstrip("/")
    for name, (latest, versions, latest_extra, packument_extra) in REGISTRY.items():
        if path == name:
            return httpx.Response(
                200,
                json={
                    "name": name,
                    "dist-tags": {"latest": latest},
                    "versions": {v: {"version": v} for v in versions},
                    **packument_extra,
                },
            )
        if path.startswith(name + "/"):
            version = path[len(name) + 1:]
            if version == "latest":
                version = latest
                extra = latest_extra
            else:
                extra = {}
            if version not in versions:
                return httpx.Response(404, json={"error": "version not found"})
            body = {"name": name, "version": version, **extra}
            if versions[version]:
                body["peerDependencies"] = versions[version]
            return httpx.Response(200, json=body)
    return httpx.Response(404, json={"error": "Not found"})


@pytest.fixture
def project(temp_dir: Path) -> Path:
    """Create a project whose package.json uses the mocked registry packages."""
    manifest = {
        "name": "app",
        "dependencies": {
            "@angular/core": "^19.0.0",
            "rxjs": "~7.8.0",
            "@ngx-translate/core": "^14.0.0",
            "chart.js": "^4.4.0",
            "ngx-old-thing": "1.0.0",
        },
        "devDependencies": {"not-published": "^0.1.0"},
    }
    (temp_dir / "package.json").write_text(json.dumps(manifest))
    return temp_dir


async def run_pipeline(project: Path, options: ScanOptions) -> tuple[list, WorkerPool, ProgressTracker]:
    """Load the manifest and check it against the mocked registry."""
    settings = PeerCompatConfig(registry=RegistryConfig(max_retries=0))
    entries = load_manifest(project, settings.framework.excluded_prefixes)
    tracker = ProgressTracker()
    transport = httpx.MockTransport(registry_handler)

    async with NpmRegistryClient(settings.registry, transport=transport) as registry:
        checker = PackageChecker(
            registry,
            options,
            settings.framework,
            MigrationLinkResolver(settings.migration_links, settings.framework.excluded_prefixes),
        )
        pool = WorkerPool(checker, options, ProgressPublisher([tracker]))
        records = await pool.run(entries)
    return records, pool, tracker


class TestFullPipeline:
    """End-to-end checks through the HTTP client."""

    @pytest.mark.asyncio
    async def test_full_scan(self, project: Path) -> None:
        """Test every record of a full scan."""
        records, pool, tracker = await run_pipeline(project, ScanOptions(jobs=3))

        assert [r.name for r in records] == [
            "@ngx-translate/core",
            "chart.js",
            "ngx-old-thing",
            "rxjs",
            "not-published",
        ]
        by_name = {r.name: r for r in records}

        translate = by_name["@ngx-translate/core"]
        assert translate.latest_compat == "16.0.3"
        assert translate.earliest_compat == "15.0.0"
        assert translate.recommendation.display == "#1 Must upgrade to 15.0.0"
        assert translate.distance == "2 major versions behind latest compatible"
        assert translate.compatibility is not None
        assert translate.compatibility.has_gap() is False
        assert translate.migration_link == "https://github.com/ngx-translate/core/releases"

        chart = by_name["chart.js"]
        assert chart.earliest_compat == "n/a"
        assert chart.recommendation.display == "#3 Keep current version"
        assert chart.note == "Likely compatible with Angular 19 - No explicit framework dependencies detected"
        assert chart.migration_link == "https://github.com/chartjs/Chart.js"
        assert chart.versions_probed == 1

        old = by_name["ngx-old-thing"]
        assert old.recommendation.note == "No compatible version found for Angular 19"
        assert old.distance == "No compatible version found"
        assert old.earliest_compat == "n/a"
        assert old.latest_compat == "n/a"

        assert by_name["rxjs"].recommendation.display == "#2 Optionally upgrade to 7.8.1"
        assert by_name["not-published"].failed is True

        assert tracker.percent == 100.0
        assert pool.summary is not None
        assert pool.summary.failures == 1

    @pytest.mark.asyncio
    async def test_fast_scan_extends_to_current(self, project: Path) -> None:
        """Test that fast mode still reaches the pinned version of a peer-constrained package."""
        records, _, _ = await run_pipeline(project, ScanOptions(jobs=2, fast_limit=1))

        translate = next(r for r in records if r.name == "@ngx-translate/core")
        assert translate.compatibility is not None
        assert translate.compatibility.extended is True
        assert translate.compatibility.current_version_found is True
        assert [p.version for p in translate.compatibility.probes] == ["16.0.3", "15.0.0", "14.0.0"]

    @pytest.mark.asyncio
    async def test_prerelease_included(self, project: Path) -> None:
        """Test that prereleases become candidates on request."""
        records, _, _ = await run_pipeline(project, ScanOptions(jobs=1, include_prerelease=True))

        translate = next(r for r in records if r.name == "@ngx-translate/core")
        assert translate.latest_compat == "16.1.0-beta.0"

    @pytest.mark.asyncio
    async def test_csv_has_one_row_per_entry(self, project: Path) -> None:
        """Test the rendered CSV."""
        records, _, _ = await run_pipeline(project, ScanOptions(jobs=4))

        rows = list(csv.reader(io.StringIO(render_csv(records))))

        assert len(rows) == 1 + 5
