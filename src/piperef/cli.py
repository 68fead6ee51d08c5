"""piperef CLI: validate and substitute variable references in Task manifests."""

from pathlib import Path

import typer
import yaml
from rich.console import Console
from rich.markup import escape

from piperef import __version__

from .config import DEFAULT_FEATURE_FLAGS, ApiFields, FeatureFlags
from .exceptions import ConfigurationError, FieldErrors, SpecLoadError, SubstitutionInvariantError
from .execution import (
    TaskRunContext,
    WorkspaceBinding,
    build_binding,
    substitute_task_spec,
    validate_array_index_bounds,
)
from .loader import dump_yaml, load_feature_flags, load_manifest
from .logging import configure_logging
from .models import StepAction, Task
from .validation import validate_step_action_spec, validate_task, validate_task_spec

# Exit codes
EXIT_INVALID = 1
EXIT_USAGE = 2
EXIT_DEFECT = 3


def _version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"piperef {__version__}")
        raise typer.Exit()


app = typer.Typer(
    name="piperef",
    help="Validate and substitute $(...) variable references in Task manifests",
    no_args_is_help=True,
)

console = Console()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase verbosity (-v, -vv)",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Suppress non-error output",
    ),
    no_color: bool = typer.Option(
        False,
        "--no-color",
        help="Disable colored output",
    ),
) -> None:
    """piperef - variable reference validation for CI/CD Task templates."""
    configure_logging(verbosity=verbose, quiet=quiet, no_color=no_color)


def _fail(message: str, code: int) -> typer.Exit:
    console.print(f"[red]Error:[/red] {escape(message)}", highlight=False, soft_wrap=True)
    return typer.Exit(code)


def _resolve_flags(config: Path | None, api_fields: str | None) -> FeatureFlags:
    flags = load_feature_flags(config) if config is not None else DEFAULT_FEATURE_FLAGS
    if api_fields is not None:
        try:
            tier = ApiFields(api_fields.lower())
        except ValueError:
            raise ConfigurationError("enable-api-fields", api_fields, "expected one of alpha, beta, stable") from None
        flags = FeatureFlags(
            enable_api_fields=tier,
            enable_param_enum=flags.enable_param_enum,
            enable_cel_in_when_expression=flags.enable_cel_in_when_expression,
        )
    return flags


def _report(errs: FieldErrors) -> None:
    # Rendered verbatim: messages contain brackets that are not markup
    for error in errs.merged():
        typer.echo(error.render())


@app.command()
def validate(
    file: Path = typer.Argument(..., help="Task or StepAction manifest"),
    config: Path | None = typer.Option(
        None, "--config", "-c", help="Feature flags ConfigMap manifest"
    ),
    api_fields: str | None = typer.Option(
        None, "--api-fields", help="Override enable-api-fields (alpha, beta, stable)"
    ),
    propagated_params: bool = typer.Option(
        False,
        "--propagated-params",
        help="Accept references to parameters the Task does not declare",
    ),
) -> None:
    """Validate every variable reference and declaration in a manifest."""
    try:
        flags = _resolve_flags(config, api_fields)
        manifest = load_manifest(file)
    except (SpecLoadError, ConfigurationError) as e:
        raise _fail(str(e), EXIT_USAGE) from None

    if isinstance(manifest, StepAction):
        errs = validate_step_action_spec(manifest.spec, flags)
    elif propagated_params:
        errs = validate_task_spec(manifest.spec, flags, propagated_params=True).via_field("spec")
    else:
        errs = validate_task(manifest, flags)

    if errs:
        _report(errs)
        raise typer.Exit(EXIT_INVALID)
    console.print(f"[green]✓[/green] {escape(str(file))} is valid", highlight=False, soft_wrap=True)


def _parse_params(values: list[str]) -> dict[str, object]:
    params: dict[str, object] = {}
    for item in values:
        name, sep, raw = item.partition("=")
        if not sep or not name:
            raise ConfigurationError("--param", item, "expected name=value")
        # Arrays and objects are given as YAML flow collections, e.g. [a, b] or {k: v}
        params[name] = yaml.safe_load(raw) if raw.lstrip().startswith(("[", "{")) else raw
    return params


def _parse_workspaces(values: list[str]) -> dict[str, WorkspaceBinding]:
    bound: dict[str, WorkspaceBinding] = {}
    for item in values:
        name, _, claim = item.partition("=")
        bound[name] = WorkspaceBinding(claim=claim, volume=f"ws-{name}")
    return bound


@app.command()
def substitute(
    file: Path = typer.Argument(..., help="Task manifest"),
    param: list[str] | None = typer.Option(
        None, "--param", "-p", help="Parameter value as name=value; [a, b] for arrays"
    ),
    workspace: list[str] | None = typer.Option(
        None, "--workspace", "-w", help="Bound workspace as name or name=claim"
    ),
    taskrun_name: str = typer.Option("", "--taskrun-name", help="Name of the TaskRun"),
    namespace: str = typer.Option("", "--namespace", help="Namespace of the TaskRun"),
    uid: str = typer.Option("", "--uid", help="UID of the TaskRun"),
    retry_count: int = typer.Option(0, "--retry-count", help="Retry attempt number"),
    config: Path | None = typer.Option(
        None, "--config", "-c", help="Feature flags ConfigMap manifest"
    ),
) -> None:
    """Print a Task with every variable reference replaced by its value."""
    try:
        flags = _resolve_flags(config, None)
        manifest = load_manifest(file)
        params = _parse_params(param or [])
    except (SpecLoadError, ConfigurationError) as e:
        raise _fail(str(e), EXIT_USAGE) from None
    if not isinstance(manifest, Task):
        raise _fail("substitution is only supported for Task manifests", EXIT_USAGE)

    errs = validate_task(manifest, flags)
    if errs:
        _report(errs)
        raise typer.Exit(EXIT_INVALID)

    context = TaskRunContext(
        task_name=manifest.metadata.name,
        task_run_name=taskrun_name,
        task_run_namespace=namespace,
        task_run_uid=uid,
        retry_count=retry_count,
    )
    binding = build_binding(manifest.spec, params, context, _parse_workspaces(workspace or []))
    missing = sorted(p.name for p in manifest.spec.params if binding.param(p.name) is None)
    if missing:
        raise _fail(f"missing values for parameters: {', '.join(missing)}", EXIT_INVALID)

    bounds = validate_array_index_bounds(manifest.spec, binding)
    if bounds:
        _report(bounds)
        raise typer.Exit(EXIT_INVALID)

    try:
        spec = substitute_task_spec(manifest.spec, binding)
    except SubstitutionInvariantError as e:
        raise _fail(str(e), EXIT_DEFECT) from None
    typer.echo(dump_yaml(manifest.model_copy(update={"spec": spec})), nl=False)
