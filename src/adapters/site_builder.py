"""Builder mínimo del sitio estático (Jinja2).

Por qué está en adapters:
- Leer templates y escribir HTML es infraestructura (filesystem/Jinja2).
- El Core solo registra datos globales y providers de colecciones.

Contrato con los providers:
- Todas las colecciones se resuelven antes de renderizar el primer template.
- Se ejecutan en paralelo; la suspensión de una no bloquea a las demás.
- Si una falla, el build falla entero y no se escribe nada.
"""

from __future__ import annotations

import asyncio
import fnmatch
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, TemplateError, select_autoescape

from core.errors import BuildError
from core.interfaces.collections import CollectionProvider
from core.log import get_logger

logger = get_logger(__name__)

TEMPLATE_SUFFIXES = (".html", ".j2", ".njk")


class CollectionApi:
    """Vista de solo lectura del input que recibe cada provider."""

    def __init__(self, *, input_dir: Path, templates: list[Path]) -> None:
        self.input_dir = input_dir
        self._templates = templates

    def get_all(self) -> list[Path]:
        return list(self._templates)

    def get_filtered_by_glob(self, pattern: str) -> list[Path]:
        return [
            p for p in self._templates if fnmatch.fnmatch(p.relative_to(self.input_dir).as_posix(), pattern)
        ]


@dataclass
class BuildReport:
    """Resumen de un build terminado."""

    output_dir: Path
    written: list[Path] = field(default_factory=list)
    collection_sizes: dict[str, int] = field(default_factory=dict)


class SiteBuilder:
    def __init__(self, *, input_dir: Path, output_dir: Path) -> None:
        self.input_dir = Path(input_dir)
        self.output_dir = Path(output_dir)
        self._global_data: dict[str, Any] = {}
        self._collections: dict[str, CollectionProvider] = {}

    def add_global_data(self, name: str, value: Any) -> None:
        self._global_data[name] = value

    def add_collection(self, name: str, provider: CollectionProvider) -> None:
        if name in self._collections:
            raise ValueError(f"Collection '{name}' is already registered")
        self._collections[name] = provider

    @property
    def collection_names(self) -> list[str]:
        return list(self._collections)

    def discover_templates(self) -> list[Path]:
        """Templates renderizables. Los que empiezan por `_` son layouts/partials."""

        if not self.input_dir.is_dir():
            raise BuildError(f"Input directory not found: {self.input_dir}")
        return sorted(
            p
            for p in self.input_dir.rglob("*")
            if p.is_file() and p.suffix in TEMPLATE_SUFFIXES and not p.name.startswith("_")
        )

    async def _run_provider(self, name: str, api: CollectionApi) -> list[Any]:
        provider = self._collections[name]
        try:
            items = list(await provider(api))
        except Exception as exc:
            raise BuildError(f"Collection '{name}' failed: {exc}") from exc
        logger.debug("Collection %s resolved with %d items", name, len(items))
        return items

    async def compute_collections(self, api: CollectionApi) -> dict[str, list[Any]]:
        names = list(self._collections)
        tasks = [asyncio.create_task(self._run_provider(name, api)) for name in names]
        try:
            results = await asyncio.gather(*tasks)
        except BaseException:
            # Un provider fallido cancela al resto; se esperan para que cierren sus clientes.
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
        return dict(zip(names, results))

    def _get_env(self) -> Environment:
        return Environment(
            loader=FileSystemLoader(str(self.input_dir)),
            autoescape=select_autoescape(["html", "xml", "j2", "njk"]),
        )

    def _output_path_for(self, template_path: Path) -> Path:
        rel = template_path.relative_to(self.input_dir)
        if rel.suffix in (".j2", ".njk"):
            rel = rel.with_suffix(".html")
        return self.output_dir / rel

    def render(self, templates: list[Path], collections: dict[str, list[Any]]) -> dict[Path, str]:
        env = self._get_env()
        context = {**self._global_data, "collections": collections}
        rendered: dict[Path, str] = {}
        for path in templates:
            name = path.relative_to(self.input_dir).as_posix()
            try:
                html = env.get_template(name).render(**context)
            except TemplateError as exc:
                raise BuildError(f"Template '{name}' failed to render: {exc}") from exc
            rendered[self._output_path_for(path)] = html
        return rendered

    async def build(self) -> BuildReport:
        templates = self.discover_templates()
        api = CollectionApi(input_dir=self.input_dir, templates=templates)
        collections = await self.compute_collections(api)
        rendered = self.render(templates, collections)

        report = BuildReport(
            output_dir=self.output_dir,
            collection_sizes={name: len(items) for name, items in collections.items()},
        )
        try:
            for output_path, html in rendered.items():
                output_path.parent.mkdir(parents=True, exist_ok=True)
                output_path.write_text(html, encoding="utf-8")
                report.written.append(output_path)
        except OSError as exc:
            for written in report.written:
                written.unlink(missing_ok=True)
            raise BuildError(f"Could not write output to {self.output_dir}: {exc}") from exc

        logger.info("Wrote %d pages to %s", len(report.written), self.output_dir)
        return report
