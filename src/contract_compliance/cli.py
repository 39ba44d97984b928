"""
Command-line interface for the contract compliance engine.
"""

import json
import logging
import sys
from pathlib import Path
from typing import Any, Optional

import click
import structlog

from contract_compliance.config import get_settings
from contract_compliance.exceptions import ComplianceEngineError
from contract_compliance.models.clause import ClauseSearchFilters, ImprovementGoal, SmartSuggestionRequest
from contract_compliance.models.compliance import ClauseCategory, RiskLevel

logger = structlog.get_logger(__name__)

CATEGORY_CHOICE = click.Choice([c.value for c in ClauseCategory], case_sensitive=False)


def configure_logging(debug: bool) -> None:
    """Route structlog output to stderr at the configured level."""
    level = logging.DEBUG if debug else logging.getLevelName(get_settings().log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )


def write_output(data: Any, output: Optional[str]) -> None:
    """Write JSON results to a file, or echo them when no file is given."""
    text = json.dumps(data, indent=2, default=str)
    if output:
        Path(output).write_text(text, encoding="utf-8")
        click.echo(f"\nResults written to: {output}")
    else:
        click.echo(text)


def _library_service():
    from contract_compliance.library.service import get_clause_library_service
    return get_clause_library_service()


def _resolve_library(service, library_id: Optional[str]) -> str:
    library_id = library_id or service.default_library_id
    if library_id is None:
        raise click.UsageError("No library given and no default library is seeded")
    return library_id


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, debug: bool) -> None:
    """Contract compliance analysis and clause suggestions."""
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug
    configure_logging(debug)


# =========================================================================
# Compliance Commands
# =========================================================================


@cli.command()
@click.argument("contract_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--framework", "-f", "frameworks", multiple=True, required=True,
              help="Framework to analyze against (repeatable)")
@click.option("--jurisdiction", "-j", help="Jurisdiction (defaults from settings)")
@click.option("--client-id", help="Client id for client-specific rules")
@click.option("--rules", "rules_path", type=click.Path(exists=True, dir_okay=False),
              help="JSON file with custom rules")
@click.option("--output", "-o", type=click.Path(), help="Output file for results")
def analyze(
    contract_path: str,
    frameworks: tuple[str, ...],
    jurisdiction: Optional[str],
    client_id: Optional[str],
    rules_path: Optional[str],
    output: Optional[str],
) -> None:
    """Analyze a contract file against compliance frameworks."""
    from contract_compliance.compliance.analyzer import ComplianceAnalyzer
    from contract_compliance.rules.corpus import RuleCorpus

    path = Path(contract_path)
    try:
        corpus = RuleCorpus.from_json_file(rules_path) if rules_path else None
        analyzer = ComplianceAnalyzer(corpus=corpus)
        analysis = analyzer.analyze_contract(
            text=path.read_text(encoding="utf-8"),
            document_name=path.name,
            frameworks=[f.upper() for f in frameworks],
            jurisdiction=jurisdiction,
            client_id=client_id,
        )
    except ComplianceEngineError as e:
        logger.error("analysis_failed", contract_path=contract_path, **e.to_dict())
        raise click.ClickException(str(e)) from e

    click.echo(f"\nContract: {analysis.document_name}")
    click.echo(f"Overall score: {analysis.overall_compliance_score:.1f} ({analysis.overall_risk_level.value})")
    for score in analysis.frameworks:
        click.echo(
            f"  {score.framework}: {score.overall_score:.1f} "
            f"({score.risk_level.value}, {len(score.violations)} violation(s))"
        )
    click.echo(
        f"Issues: {len(analysis.critical_issues)} critical, "
        f"{len(analysis.medium_issues)} medium, {len(analysis.low_issues)} low"
    )
    if analysis.auto_tags:
        click.echo(f"Tags: {', '.join(analysis.auto_tags)}")

    if output:
        write_output(analysis.to_dict(), output)


@cli.command()
@click.option("--framework", "-f", help="Only rules for this framework")
@click.option("--category", "-c", type=CATEGORY_CHOICE, help="Only rules in this category")
def rules(framework: Optional[str], category: Optional[str]) -> None:
    """List the compliance rules analyses run against."""
    from contract_compliance.compliance.analyzer import ComplianceAnalyzer

    try:
        corpus = ComplianceAnalyzer().corpus
    except ComplianceEngineError as e:
        raise click.ClickException(str(e)) from e

    selected = list(corpus)
    if framework:
        selected = [r for r in selected if r.framework == framework.upper()]
    if category:
        selected = [r for r in selected if r.category == ClauseCategory(category.upper())]

    if not selected:
        click.echo("No rules found")
        return

    for rule in selected:
        click.echo(f"{rule.id:<32} {rule.framework:<9} {rule.risk_level.value:<9} {rule.weight:.1f}  {rule.name}")


# =========================================================================
# Clause Library Commands
# =========================================================================


@cli.command()
@click.argument("query", default="")
@click.option("--library", "library_id", help="Library id (defaults to the seeded library)")
@click.option("--category", "-c", "categories", type=CATEGORY_CHOICE, multiple=True, help="Filter by category")
@click.option("--framework", "-f", "frameworks", multiple=True, help="Filter by framework")
def search(
    query: str,
    library_id: Optional[str],
    categories: tuple[str, ...],
    frameworks: tuple[str, ...],
) -> None:
    """Search clause templates."""
    service = _library_service()
    filters = ClauseSearchFilters(
        categories=[ClauseCategory(c.upper()) for c in categories] or None,
        compliance_frameworks=[f.upper() for f in frameworks] or None,
    )
    try:
        results = service.search_clauses(_resolve_library(service, library_id), query, filters)
    except ComplianceEngineError as e:
        raise click.ClickException(str(e)) from e

    click.echo(f"Found {len(results)} clause(s)")
    for clause in results:
        click.echo(f"\n[{clause.id}] {clause.title} ({clause.category.value}, {clause.risk_level.value})")
        click.echo(f"  {clause.content[:120]}{'...' if len(clause.content) > 120 else ''}")


@cli.command()
@click.argument("clause", type=str)
@click.option("--category", "-c", type=CATEGORY_CHOICE, required=True, help="Clause category")
@click.option("--framework", "-f", "frameworks", multiple=True, help="Compliance framework (repeatable)")
@click.option("--improve", "-i", "improvements", multiple=True,
              type=click.Choice([g.value for g in ImprovementGoal]), help="Improvement goal (repeatable)")
@click.option("--risk-level", type=click.Choice([r.value for r in RiskLevel]), default=RiskLevel.MEDIUM.value)
@click.option("--jurisdiction", "-j", help="Jurisdiction (defaults from settings)")
@click.option("--max", "max_suggestions", type=int, help="Maximum suggestions")
@click.option("--library", "library_id", help="Library id (defaults to the seeded library)")
@click.option("--output", "-o", type=click.Path(), help="Output file for results")
def suggest(
    clause: str,
    category: str,
    frameworks: tuple[str, ...],
    improvements: tuple[str, ...],
    risk_level: str,
    jurisdiction: Optional[str],
    max_suggestions: Optional[int],
    library_id: Optional[str],
    output: Optional[str],
) -> None:
    """Suggest improvements for a clause."""
    settings = get_settings()
    service = _library_service()
    request = SmartSuggestionRequest(
        original_clause=clause,
        category=ClauseCategory(category.upper()),
        compliance_frameworks=[f.upper() for f in frameworks],
        jurisdiction=jurisdiction or settings.default_jurisdiction,
        risk_level=RiskLevel(risk_level),
        desired_improvements=list(improvements),
        max_suggestions=max_suggestions or settings.default_max_suggestions,
    )
    try:
        suggestions = service.generate_smart_suggestions(request, _resolve_library(service, library_id))
    except ComplianceEngineError as e:
        raise click.ClickException(str(e)) from e

    if not suggestions:
        click.echo("No suggestions")
    for suggestion in suggestions:
        click.echo(f"\n{suggestion.title} [{suggestion.suggestion_type.value}] confidence={suggestion.confidence:.2f}")
        click.echo(f"  {suggestion.suggested_clause}")

    if output:
        write_output([s.to_dict() for s in suggestions], output)


@cli.command()
@click.argument("original", type=str)
@click.argument("suggested", type=str)
@click.option("--output", "-o", type=click.Path(), help="Output file for results")
def compare(original: str, suggested: str, output: Optional[str]) -> None:
    """Compare a clause with a proposed replacement."""
    from contract_compliance.library.comparator import ClauseComparator

    comparison = ClauseComparator().compare(original, suggested)

    click.echo(f"Recommendation: {comparison.recommendation.value} (score {comparison.overall_score:.2f})")
    for difference in comparison.differences:
        click.echo(f"  {difference.type.value:<12} {difference.impact.value:<8} {difference.description}")
    for improvement in comparison.improvements:
        click.echo(f"  + {improvement}")
    for concern in comparison.concerns:
        click.echo(f"  - {concern}")

    if output:
        write_output(comparison.to_dict(), output)


# =========================================================================
# Config Commands
# =========================================================================


@cli.command()
def config() -> None:
    """Show current configuration."""
    settings = get_settings()

    click.echo("\n=== Contract Compliance Configuration ===\n")
    click.echo(f"Environment: {settings.environment}")
    click.echo(f"Debug: {settings.debug}")
    click.echo(f"Log level: {settings.log_level}")
    click.echo(f"\nDefault jurisdiction: {settings.default_jurisdiction}")
    click.echo(f"Custom rules: {settings.custom_rules_path or 'none'}")
    click.echo(
        f"Risk thresholds: LOW>={settings.risk_threshold_low:g} "
        f"MEDIUM>={settings.risk_threshold_medium:g} HIGH>={settings.risk_threshold_high:g}"
    )
    click.echo(f"\nSimilarity threshold: {settings.similarity_threshold}")
    click.echo(f"Template suggestion threshold: {settings.template_suggestion_threshold}")
    click.echo(f"Max suggestions: {settings.default_max_suggestions}")


def main() -> None:
    """Entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
