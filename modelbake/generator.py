# File: modelbake/generator.py
"""
modelbake - Bake Pipeline (Orchestrator)
=========================================

Connects every phase of a bake run:

    Schema Source → Catalog → Inference → Template Generation → File Export

Workflow::

    1. Read the whole catalog once (fatal on failure, nothing written).
    2. Resolve each requested model to its table.
    3. Build one ``ModelBundle`` per model: associations, validation,
       primary key, display field, accessible fields, behaviours.
    4. Render model, fixture and test files (``templates.py``).
    5. Hand the rendered files to ``ProjectExporter`` (``exporters.py``).
    6. Return a ``GenerationReport`` with metrics and status.

Error handling strategy:
    - Catalog errors (unreachable, empty, unknown table) propagate
      unmodified to the caller before any file is written.
    - Export errors are collected per file and surfaced in the report.

Complexity: O(M × T × C) for M models over T tables of C columns.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from modelbake.associations import find_behaviors, infer_associations
from modelbake.catalog import SchemaSource, build_catalog
from modelbake.errors import UnknownTableError
from modelbake.exporters import ExportResult, ProjectExporter
from modelbake.fields import get_display_field, get_fields, get_primary_key
from modelbake.models import Associations, BakeOptions, Catalog, ModelBundle, TableSchema
from modelbake.naming import model_name_from_table, table_from_model, to_snake_case
from modelbake.templates import TemplateGenerator
from modelbake.utils import Timer
from modelbake.validators import synthesize_validation

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("modelbake.generator")

# ---------------------------------------------------------------------------
# Output layout
# ---------------------------------------------------------------------------

BASE_MODEL_PATH: str = "models/base.py"
MODEL_PATH: str = "models/{module}.py"
FIXTURE_PATH: str = "tests/fixtures/{module}_fixture.py"
TEST_PATH: str = "tests/models/test_{module}.py"


# ---------------------------------------------------------------------------
# Generation report
# ---------------------------------------------------------------------------


@dataclass(frozen=False, slots=True)
class GenerationStepMetric:
    """Timing and outcome for a single pipeline step."""

    step_name: str = ""
    success: bool = True
    elapsed_seconds: float = 0.0
    detail: str = ""


@dataclass(frozen=False, slots=True)
class GenerationReport:
    """Outcome of ``ModelBaker.generate()`` / ``generate_all()``."""

    success: bool = False
    connection: str = ""
    output_directory: str = ""
    dry_run: bool = False

    models: List[str] = field(default_factory=list)
    files_written: List[str] = field(default_factory=list)
    skipped_files: List[str] = field(default_factory=list)
    export_errors: List[str] = field(default_factory=list)
    step_metrics: List[GenerationStepMetric] = field(default_factory=list)

    total_bytes: int = 0
    total_lines: int = 0
    total_elapsed_seconds: float = 0.0

    def summary(self) -> str:
        """Return a human-readable summary string."""
        lines: List[str] = []
        status: str = "SUCCESS" if self.success else "FAILED"
        if self.dry_run:
            status += " (dry run)"
        lines.append(f"{'=' * 60}")
        lines.append("  modelbake - Bake Report")
        lines.append(f"{'=' * 60}")
        lines.append(f"  Status:          {status}")
        lines.append(f"  Connection:      {self.connection}")
        lines.append(f"  Output:          {self.output_directory}")
        lines.append(f"  Models baked:    {len(self.models)}")
        lines.append(f"  Files written:   {len(self.files_written)}")
        lines.append(f"  Files skipped:   {len(self.skipped_files)}")
        lines.append(f"  Total lines:     {self.total_lines:,}")
        lines.append(f"  Total time:      {self.total_elapsed_seconds:.3f}s")
        lines.append(f"{'-' * 60}")

        if self.step_metrics:
            lines.append("  Pipeline Steps:")
            for step in self.step_metrics:
                icon: str = "✓" if step.success else "✗"
                lines.append(
                    f"    {icon} {step.step_name:<20s} "
                    f"{step.elapsed_seconds:>7.3f}s  {step.detail}"
                )

        if self.models:
            lines.append(f"{'-' * 60}")
            lines.append(f"  Models: {', '.join(self.models)}")

        if self.skipped_files:
            lines.append(f"{'-' * 60}")
            lines.append(f"  Skipped, already present ({len(self.skipped_files)}):")
            for path in self.skipped_files:
                lines.append(f"    ⊘ {path}")

        if self.export_errors:
            lines.append(f"{'-' * 60}")
            lines.append(f"  Export Errors ({len(self.export_errors)}):")
            for err in self.export_errors:
                lines.append(f"    ✗ {err}")

        lines.append(f"{'=' * 60}")
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# ModelBaker: the orchestrator
# ---------------------------------------------------------------------------


class ModelBaker:
    """
    Generates model, fixture and test files for tables of one connection.

    Usage::

        with FixtureSchemaSource.from_file(Path("schema.yaml")) as source:
            baker = ModelBaker(source, BakeOptions(force=True))
            print(baker.list_tables())
            report = baker.generate("Post")
        print(report.summary())

    The catalog is read on first use and kept for the lifetime of the
    baker; the source is closed as soon as it has been read.
    """

    def __init__(
        self,
        source: SchemaSource,
        options: Optional[BakeOptions] = None,
        renderer: Optional[TemplateGenerator] = None,
        exporter: Optional[ProjectExporter] = None,
        connection: Optional[str] = None,
    ) -> None:
        self._source: SchemaSource = source
        self._options: BakeOptions = options or BakeOptions()
        self._renderer: TemplateGenerator = renderer or TemplateGenerator()
        self._exporter: ProjectExporter = exporter or ProjectExporter(
            Path("."), force=self._options.force, dry_run=self._options.dry_run
        )
        self._connection: str = connection or source.name
        self._catalog: Optional[Catalog] = None
        self._catalog_elapsed: float = 0.0

    @property
    def options(self) -> BakeOptions:
        return self._options

    @property
    def connection(self) -> str:
        return self._connection

    # -----------------------------------------------------------------
    # Catalog
    # -----------------------------------------------------------------

    def load_catalog(self) -> Catalog:
        """
        Read the full catalog, once.

        Raises:
            SchemaConnectionError: The source cannot be read.
            EmptyCatalogError: The source holds no tables.
        """
        if self._catalog is None:
            with Timer("read_catalog") as t:
                try:
                    self._catalog = build_catalog(self._source)
                finally:
                    self._source.close()
            self._catalog_elapsed = t.elapsed
        return self._catalog

    def list_tables(self) -> List[str]:
        """Tables available for baking, skip-listed tables removed."""
        skip = set(self._options.skip_tables)
        return [name for name in self.load_catalog().table_names if name not in skip]

    # -----------------------------------------------------------------
    # Bundle construction
    # -----------------------------------------------------------------

    def resolve(self, name: str, table: Optional[str] = None) -> Tuple[str, str]:
        """
        Map a model or table name to ``(class_name, table_name)``.

        The table is *table*, else ``options.table``, else the
        conventional table of the class name.
        """
        class_name: str = model_name_from_table(to_snake_case(name))
        use_table: str = table or self._options.table or table_from_model(class_name)
        return class_name, use_table

    def build_bundle(self, name: str, table: Optional[str] = None) -> ModelBundle:
        """
        Collect everything the renderer needs for one model.

        Raises:
            UnknownTableError: The resolved table is not in the catalog.
        """
        catalog: Catalog = self.load_catalog()
        class_name, use_table = self.resolve(name, table)
        schema: Optional[TableSchema] = catalog.get(use_table)
        if schema is None:
            logger.error("Table '%s' for model %s is not in the catalog.", use_table, class_name)
            raise UnknownTableError(use_table, catalog.table_names)

        opts: BakeOptions = self._options
        primary_key: List[str] = get_primary_key(schema, opts.primary_key)

        associations: Associations = (
            Associations()
            if opts.no_associations
            else infer_associations(schema, catalog, class_name)
        )

        bundle: ModelBundle = ModelBundle(
            name=class_name,
            use_table=use_table,
            associations=associations,
            validation=(
                []
                if opts.no_validation
                else synthesize_validation(schema, primary_key, opts.audit_columns)
            ),
            primary_key=primary_key,
            display_field=get_display_field(
                schema, opts.display_field, opts.display_field_preference
            ),
            accessible_fields=get_fields(
                schema,
                no_fields=opts.no_fields,
                fields=opts.fields,
                excluded=opts.excluded_fields,
            ),
            behaviors=find_behaviors(schema),
            connection=self._connection,
        )
        logger.debug("Built bundle %r.", bundle)
        return bundle

    def render_bundle(self, bundle: ModelBundle) -> Dict[str, str]:
        """Render the files of one model, keyed by relative output path."""
        catalog: Catalog = self.load_catalog()
        module: str = to_snake_case(bundle.name)
        files: Dict[str, str] = {
            MODEL_PATH.format(module=module): self._renderer.generate_model(bundle, catalog),
        }
        if not self._options.no_fixture:
            files[FIXTURE_PATH.format(module=module)] = self._renderer.generate_fixture(
                bundle.name, bundle.use_table, catalog.get(bundle.use_table)
            )
        if not self._options.no_test:
            files[TEST_PATH.format(module=module)] = self._renderer.generate_test(
                bundle.name,
                bundle.use_table,
                module_name=module,
                with_fixture=not self._options.no_fixture,
            )
        return files

    # -----------------------------------------------------------------
    # Public: generate
    # -----------------------------------------------------------------

    def generate(self, name: str) -> GenerationReport:
        """Bake a single model (``"Post"``) or table (``"posts"``)."""
        return self._run([(name, None)])

    def generate_all(self) -> GenerationReport:
        """Bake every table of the catalog except the skip-listed ones."""
        tables: List[str] = self.list_tables()
        return self._run([(model_name_from_table(t), t) for t in tables])

    # -----------------------------------------------------------------
    # Internal: master pipeline
    # -----------------------------------------------------------------

    def _run(self, targets: List[Tuple[str, Optional[str]]]) -> GenerationReport:
        pipeline_start: float = time.perf_counter()
        report: GenerationReport = GenerationReport(
            connection=self._connection,
            output_directory=str(self._exporter.output_dir),
            dry_run=self._options.dry_run,
        )

        # --- Step: Catalog (fatal errors propagate) ---
        catalog: Catalog = self.load_catalog()
        report.step_metrics.append(GenerationStepMetric(
            step_name="Read Catalog",
            elapsed_seconds=self._catalog_elapsed,
            detail=f"{len(catalog)} tables",
        ))

        # --- Step: Inference, every bundle before any write ---
        with Timer("inference") as t_infer:
            bundles: List[ModelBundle] = [self.build_bundle(n, tbl) for n, tbl in targets]
        report.models = [b.name for b in bundles]
        report.step_metrics.append(GenerationStepMetric(
            step_name="Infer Models",
            elapsed_seconds=t_infer.elapsed,
            detail=(
                f"{len(bundles)} models, "
                f"{sum(b.association_count for b in bundles)} associations"
            ),
        ))

        # --- Step: Render ---
        with Timer("render") as t_render:
            files: Dict[str, str] = {BASE_MODEL_PATH: self._renderer.generate_base()}
            for bundle in bundles:
                files.update(self.render_bundle(bundle))
        report.step_metrics.append(GenerationStepMetric(
            step_name="Render Templates",
            elapsed_seconds=t_render.elapsed,
            detail=f"{len(files)} files",
        ))

        # --- Step: Export ---
        result: ExportResult = self._exporter.export(files, keep_existing=[BASE_MODEL_PATH])
        report.files_written = [r.relative_path for r in result.written]
        report.skipped_files = list(result.skipped)
        report.export_errors = list(result.errors)
        report.total_bytes = result.total_bytes
        report.total_lines = result.total_lines
        report.step_metrics.append(GenerationStepMetric(
            step_name="Export Files",
            success=result.success,
            elapsed_seconds=result.elapsed_seconds,
            detail=f"{len(result.written)} written, {len(result.skipped)} skipped",
        ))

        report.success = result.success
        report.total_elapsed_seconds = time.perf_counter() - pipeline_start
        logger.info(
            "Baked %d model(s) for connection '%s' in %.3fs.",
            len(bundles),
            self._connection,
            report.total_elapsed_seconds,
        )
        return report


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "ModelBaker",
    "GenerationReport",
    "GenerationStepMetric",
    "BASE_MODEL_PATH",
    "MODEL_PATH",
    "FIXTURE_PATH",
    "TEST_PATH",
]

logger.debug("modelbake.generator loaded.")
