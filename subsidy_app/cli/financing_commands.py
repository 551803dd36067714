"""
Financing CLI Commands - Evaluate records and inspect lookups.

Provides command-line interface for:
- Evaluating an application record from a JSON or YAML file
- Listing field requirements for a record
- Postal code tier lookup
- Variant classification
"""
import json
import logging

import click
import yaml

from subsidy_app.config import ConfigurationError
from subsidy_app.domain.exceptions import DomainError
from subsidy_app.domain.services import FinancingEvaluationService, classify

logger = logging.getLogger(__name__)


def _load_record(path: str) -> dict:
    """Read a record file; YAML parsing also covers JSON."""
    with open(path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f)
    if not isinstance(data, dict):
        raise click.BadParameter(f"{path} must contain a mapping", param_hint='RECORD')
    return data


def _service() -> FinancingEvaluationService:
    try:
        return FinancingEvaluationService()
    except (ConfigurationError, DomainError) as e:
        raise click.ClickException(str(e))


@click.group()
def financing():
    """Financing evaluation commands."""
    pass


@financing.command()
@click.argument('record', type=click.Path(exists=True, dir_okay=False))
@click.option('--json', 'as_json', is_flag=True, help='Print the full result as JSON')
def evaluate(record: str, as_json: bool):
    """Evaluate an application record file."""
    data = _load_record(record)
    service = _service()
    currency = service.config.currency_config
    result = service.evaluate(data)
    logger.debug(f"Evaluated {record}: {len(result.violations)} violations")

    if as_json:
        click.echo(json.dumps(result.to_dict(currency), indent=2, ensure_ascii=False))
        return

    totals = result.totals.to_dict(currency)
    recon = result.reconciliation.to_dict(currency)

    click.echo(f"\n{'=' * 50}")
    click.echo(click.style("FINANCING EVALUATION", fg='cyan', bold=True))
    click.echo(f"{'=' * 50}")
    click.echo(f"Variant:             {result.classification.raw_code or '-'}")
    click.echo(f"Cost tier:           {result.tier.tier} ({result.tier.postal_code or '-'})")
    click.echo(f"Total cost:          {totals['total_cost']:>18}")
    click.echo(f"Own contribution:    {totals['own_contribution']:>18}")
    click.echo(f"Financing:           {totals['financing_sum']:>18}")
    click.echo(f"Difference:          {recon['difference']:>18}")
    click.echo(f"Minimum own contr.:  {recon['minimum_own_contribution']:>18}")
    click.echo(f"Completeness:        {result.completeness.score:>16} %")
    click.echo(f"{'=' * 50}")

    if result.is_valid:
        click.echo(click.style("✓ No violations", fg='green'))
        return

    click.echo(click.style(f"✗ {len(result.violations)} violations", fg='red'))
    for violation in result.violations:
        click.echo(f"  [{violation.step.title}] {violation.message}")


@financing.command()
@click.argument('record', type=click.Path(exists=True, dir_okay=False))
@click.option('--all', 'show_all', is_flag=True, help='Include fields that do not apply')
def requirements(record: str, show_all: bool):
    """List field requirements for an application record file."""
    table = _service().build_rules(_load_record(record))

    for rule in table:
        if not rule.applies and not show_all:
            continue
        if not rule.applies:
            marker = click.style('-', fg='white')
        elif rule.is_satisfied:
            marker = click.style('✓', fg='green')
        else:
            marker = click.style('✗', fg='red')
        required = 'required' if rule.required else 'optional'
        click.echo(f"  {marker} {rule.key:<50} {required}")


@financing.command()
@click.argument('postal_code')
def tier(postal_code: str):
    """Show cost tier and base loan ceilings for a postal code."""
    service = _service()
    resolution = service.cap_lookup.resolve_tier(postal_code)
    data = resolution.to_dict(service.config.currency_config)

    label = "default" if resolution.is_default else "mapped"
    click.echo(f"Tier {resolution.tier} ({label})")
    click.echo(f"  Ceiling A: {data['ceiling_a']}")
    click.echo(f"  Ceiling B: {data['ceiling_b']}")
    click.echo(f"\n{resolution.message}")


@financing.command(name='classify')
@click.argument('variant')
def classify_variant(variant: str):
    """Show the predicates of a funding variant."""
    classification = classify(variant)
    if not classification.is_known:
        click.echo(click.style(f"Unknown variant '{variant}'", fg='yellow'))

    for name, value in classification.to_dict().items():
        if isinstance(value, bool):
            click.echo(f"  {name:<30} {'yes' if value else 'no'}")


def register_commands(cli):
    """Register financing commands with main CLI."""
    cli.add_command(financing)
