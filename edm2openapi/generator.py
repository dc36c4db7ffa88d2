# File: edm2openapi/generator.py
"""
edm2openapi - Generation Pipeline (Orchestrator)
=================================================

Connects every phase together:

    Model File → Parse → Validate → Walk → OpenAPI Document

The ``OpenApiGenerator`` class is the programmatic entry point.

Workflow::

    1. Load the model from a JSON/YAML file (or accept an in-memory model).
    2. Parse into ``EdmModel`` + ``GenerationConfig`` (models.py).
    3. Run the advisory validation pipeline (validators.py).
    4. Walk the navigation graph from the root collection (walker.py).
    5. Return a ``GenerationReport`` holding the document and metrics.

Error handling strategy:
    - Unreadable or malformed input raises nothing here; it is recorded in
      the report as a failed step.
    - Validation findings are surfaced, and only abort the run when the
      generator is strict.
    - The walker never raises for model problems; fatal diagnostics (no
      container, no root collection) mark the report unsuccessful.
"""

from __future__ import annotations

import json
import logging
import sys
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from edm2openapi.diagnostics import DiagnosticLog
from edm2openapi.document import OutputDocument
from edm2openapi.models import EdmModel, GenerationConfig
from edm2openapi.utils import Timer
from edm2openapi.validators import validate_model
from edm2openapi.walker import PathGraphWalker

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("edm2openapi.generator")

_MODEL_KEYS: Tuple[str, ...] = ("model", "edm", "edm_model")
_CONFIG_KEYS: Tuple[str, ...] = ("config", "generation_config")


class _PlainDumper(yaml.SafeDumper):
    """Safe dumper that writes repeated objects out in full (no anchors)."""

    def ignore_aliases(self, data: Any) -> bool:
        return True


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------


def setup_logging(verbosity: int = 0) -> None:
    """
    Attach a stderr handler to the ``edm2openapi`` logger.

    Args:
        verbosity: 0 = WARNING, 1 = INFO, 2+ = DEBUG.
    """
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity >= 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    handler: logging.StreamHandler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(
        logging.Formatter("%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s", datefmt="%H:%M:%S")
    )

    root_logger: logging.Logger = logging.getLogger("edm2openapi")
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.propagate = False


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
    """
    Report produced by ``OpenApiGenerator.generate()``.

    ``document`` is None only when the run stopped before the walk (input
    could not be loaded, or strict validation failed).
    """

    success: bool = False
    title: str = ""
    base_url: str = ""

    # Metrics
    total_paths: int = 0
    total_operations: int = 0
    total_schemas: int = 0
    total_parameters: int = 0
    actions_count: int = 0
    functions_count: int = 0
    total_elapsed_seconds: float = 0.0

    step_metrics: List[GenerationStepMetric] = field(default_factory=list)
    validation_errors: List[str] = field(default_factory=list)
    validation_warnings: List[str] = field(default_factory=list)
    generation_errors: List[str] = field(default_factory=list)

    diagnostics: DiagnosticLog = field(default_factory=DiagnosticLog)
    document: Optional[OutputDocument] = None

    def to_dict(self) -> Dict[str, Any]:
        """The generated OpenAPI document, or an empty dict."""
        return self.document.to_dict() if self.document is not None else {}

    def summary(self) -> str:
        """Return a human-readable summary string."""
        status: str = "SUCCESS" if self.success else "FAILED"
        lines: List[str] = [
            "=" * 60,
            "  edm2openapi - Generation Report",
            "=" * 60,
            f"  Status:           {status}",
            f"  Title:            {self.title}",
            f"  Server:           {self.base_url}",
            f"  Paths:            {self.total_paths}",
            f"  Operations:       {self.total_operations}",
            f"  Schemas:          {self.total_schemas}",
            f"  Parameters:       {self.total_parameters}",
            f"  Actions:          {self.actions_count}",
            f"  Functions:        {self.functions_count}",
            f"  Total time:       {self.total_elapsed_seconds:.3f}s",
            "─" * 60,
        ]

        if self.step_metrics:
            lines.append("  Pipeline Steps:")
            for step in self.step_metrics:
                icon: str = "✓" if step.success else "✗"
                lines.append(
                    f"    {icon} {step.step_name:<28s} {step.elapsed_seconds:>7.3f}s  {step.detail}"
                )

        sections: List[Tuple[str, str, List[str]]] = [
            ("Validation Errors", "✗", self.validation_errors),
            ("Validation Warnings", "⚠", self.validation_warnings),
            ("Generation Errors", "✗", self.generation_errors),
        ]
        for heading, icon, items in sections:
            if not items:
                continue
            lines.append("─" * 60)
            lines.append(f"  {heading} ({len(items)}):")
            lines.extend(f"    {icon} {item}" for item in items)

        lines.append("=" * 60)
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Model loader helpers
# ---------------------------------------------------------------------------


def _load_json_file(path: Path) -> Dict[str, Any]:
    """Load and parse a JSON file. Raises ValueError on parse errors."""
    try:
        data: Any = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object at top level, got {type(data).__name__}.")
    return data


def _load_yaml_file(path: Path) -> Dict[str, Any]:
    """Load and parse a YAML file. Raises ValueError on parse errors."""
    try:
        data: Any = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(f"Expected a YAML mapping at top level, got {type(data).__name__}.")
    return data


def load_model_file(path: Path) -> Dict[str, Any]:
    """
    Load a model file (JSON or YAML), dispatching on the extension.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ValueError: If the file can't be parsed.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Model file not found: {path}")
    if not path.is_file():
        raise ValueError(f"Model path is not a file: {path}")

    suffix: str = path.suffix.lower()
    if suffix in (".yaml", ".yml"):
        return _load_yaml_file(path)
    if suffix == ".json":
        return _load_json_file(path)

    logger.info("Unknown extension '%s', trying JSON then YAML.", suffix)
    try:
        return _load_json_file(path)
    except ValueError:
        return _load_yaml_file(path)


def parse_raw_model(
    raw: Dict[str, Any], config_overrides: Optional[Dict[str, Any]] = None
) -> Tuple[EdmModel, GenerationConfig]:
    """
    Parse a raw dictionary (from JSON/YAML) into validated Pydantic models.

    Expected top-level keys:
        - "model" (or "edm"): the entity data model; when absent the whole
          mapping minus the config section is taken as the model
        - "config" (or "generation_config"): generation settings

    Raises:
        ValueError: If validation fails.
    """
    model_data: Optional[Any] = None
    for key in _MODEL_KEYS:
        if key in raw:
            model_data = raw[key]
            break
    if model_data is None:
        model_data = {k: v for k, v in raw.items() if k not in _CONFIG_KEYS}
    if not isinstance(model_data, dict):
        raise ValueError(f"Model section must be a mapping, got {type(model_data).__name__}.")

    config_data: Dict[str, Any] = {}
    for key in _CONFIG_KEYS:
        if key in raw:
            config_data = dict(raw[key] or {})
            break
    else:
        logger.info("No generation config found in input, using defaults.")
    if config_overrides:
        config_data.update(config_overrides)

    try:
        model: EdmModel = EdmModel.model_validate(model_data)
    except Exception as exc:
        raise ValueError(f"Model validation failed: {exc}") from exc

    try:
        config: GenerationConfig = GenerationConfig.model_validate(config_data)
    except Exception as exc:
        raise ValueError(f"Config validation failed: {exc}") from exc

    return model, config


def export_document(document: OutputDocument, path: Path) -> Path:
    """
    Write ``document`` as YAML (``.yaml``/``.yml``) or JSON (anything else).
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    data: Dict[str, Any] = document.to_dict()
    if path.suffix.lower() in (".yaml", ".yml"):
        text: str = yaml.dump(data, Dumper=_PlainDumper, sort_keys=False, allow_unicode=True)
    else:
        text = json.dumps(data, indent=2, ensure_ascii=False)
    path.write_text(text, encoding="utf-8")
    logger.info("Wrote OpenAPI document to %s (%d bytes).", path, len(text))
    return path


# ---------------------------------------------------------------------------
# OpenApiGenerator - Master orchestrator
# ---------------------------------------------------------------------------


class OpenApiGenerator:
    """
    Pipeline orchestrator.

    Usage::

        generator = OpenApiGenerator()

        # From a file
        report = generator.generate_from_file(Path("model.yaml"), auth_type="OAuth2.0")

        # From in-memory objects
        report = generator.generate(model, GenerationConfig(base_url="https://api.example.com"))

        print(report.summary())

    The generator is reusable; every call gets a fresh walk.
    """

    def __init__(self, *, strict_validation: bool = False, fail_on_warnings: bool = False) -> None:
        """
        Args:
            strict_validation: If True, abort before the walk on any validation error.
            fail_on_warnings: If True (and strict), treat validation warnings as errors.
        """
        self._strict_validation: bool = strict_validation
        self._fail_on_warnings: bool = fail_on_warnings
        logger.debug(
            "OpenApiGenerator initialised: strict=%s, fail_on_warnings=%s.",
            strict_validation,
            fail_on_warnings,
        )

    # -----------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------

    def generate_from_file(self, model_path: Path, **config_overrides: Any) -> GenerationReport:
        """
        Full pipeline: load file → parse → validate → walk.

        Keyword arguments override fields of the file's ``config`` section.
        """
        report: GenerationReport = GenerationReport()
        pipeline_start: float = time.perf_counter()

        with Timer("load_model") as t_load:
            try:
                raw_data: Dict[str, Any] = load_model_file(Path(model_path))
            except (FileNotFoundError, ValueError) as exc:
                raw_data = {}
                report.generation_errors.append(str(exc))
        report.step_metrics.append(
            GenerationStepMetric(
                step_name="Load Model File",
                success=not report.generation_errors,
                elapsed_seconds=t_load.elapsed,
                detail=report.generation_errors[-1] if report.generation_errors else f"from {Path(model_path).name}",
            )
        )
        if report.generation_errors:
            return self._finalise_report(report, time.perf_counter() - pipeline_start)

        with Timer("parse_model") as t_parse:
            try:
                model, config = parse_raw_model(raw_data, config_overrides)
            except ValueError as exc:
                report.generation_errors.append(str(exc))
                report.step_metrics.append(
                    GenerationStepMetric("Parse Model", False, t_parse.elapsed, str(exc))
                )
                return self._finalise_report(report, time.perf_counter() - pipeline_start)

        report.step_metrics.append(
            GenerationStepMetric(
                "Parse Model",
                True,
                t_parse.elapsed,
                f"{len(model.types)} types, {len(model.collections)} collections",
            )
        )
        logger.info("Parsed model file %s: %r", model_path, model)
        return self._run_pipeline(model, config, report, pipeline_start)

    def generate(
        self, model: EdmModel, config: Optional[GenerationConfig] = None
    ) -> GenerationReport:
        """Full pipeline from pre-parsed model and config objects."""
        return self._run_pipeline(
            model, config or GenerationConfig(), GenerationReport(), time.perf_counter()
        )

    # -----------------------------------------------------------------
    # Internal: master pipeline
    # -----------------------------------------------------------------

    def _run_pipeline(
        self,
        model: EdmModel,
        config: GenerationConfig,
        report: GenerationReport,
        pipeline_start: float,
    ) -> GenerationReport:
        report.title = config.title
        report.base_url = config.base_url

        if not self._step_validate(model, config, report) and self._strict_validation:
            return self._finalise_report(report, time.perf_counter() - pipeline_start)

        self._step_walk(model, config, report)
        return self._finalise_report(report, time.perf_counter() - pipeline_start)

    def _step_validate(
        self, model: EdmModel, config: GenerationConfig, report: GenerationReport
    ) -> bool:
        """Returns True if validation passed (warnings pass unless fail_on_warnings)."""
        with Timer("validation") as t:
            result: DiagnosticLog = validate_model(model, config)

        report.validation_errors.extend(str(d) for d in result.errors)
        report.validation_warnings.extend(str(d) for d in result.warnings)

        if result.has_errors:
            detail: str = f"{len(result.errors)} error(s)"
        elif result.has_warnings:
            detail = f"{len(result.warnings)} warning(s)"
        else:
            detail = "all checks passed"
        report.step_metrics.append(
            GenerationStepMetric("Validate Model", not result.has_errors, t.elapsed, detail)
        )

        if result.has_errors:
            return False
        if result.has_warnings and self._fail_on_warnings:
            return False
        return True

    def _step_walk(
        self, model: EdmModel, config: GenerationConfig, report: GenerationReport
    ) -> None:
        with Timer("walk") as t:
            document: OutputDocument = PathGraphWalker(model, config).walk(report.diagnostics)

        report.document = document
        report.total_paths = document.path_count
        report.total_operations = document.operation_count
        report.total_schemas = document.schema_count
        report.total_parameters = document.parameter_count
        report.actions_count = document.actions_count
        report.functions_count = document.functions_count
        report.generation_errors.extend(str(d) for d in report.diagnostics.fatals)

        report.step_metrics.append(
            GenerationStepMetric(
                "Walk Navigation Graph",
                not report.diagnostics.has_fatal,
                t.elapsed,
                f"{document.path_count} paths, {document.schema_count} schemas",
            )
        )
        logger.info(
            "Walk complete: %d paths, %d operations in %.3fs.",
            document.path_count,
            document.operation_count,
            t.elapsed,
        )

    def _finalise_report(self, report: GenerationReport, total_elapsed: float) -> GenerationReport:
        report.total_elapsed_seconds = total_elapsed
        report.success = report.document is not None and not report.generation_errors
        if self._strict_validation and report.validation_errors:
            report.success = False
        return report


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "OpenApiGenerator",
    "GenerationReport",
    "GenerationStepMetric",
    "load_model_file",
    "parse_raw_model",
    "export_document",
    "setup_logging",
]

logger.debug("edm2openapi.generator loaded.")
