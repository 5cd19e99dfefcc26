# zenith_tracker/cli.py
import click
from dotenv import load_dotenv

from zenith_tracker.ai.intents import format_amount, resolve
from zenith_tracker.analytics import get_health
from zenith_tracker.config import load_config
from zenith_tracker.core.models import Category
from zenith_tracker.recurring import BillCycle, monthly_commitment
from zenith_tracker.tracker import load_provider, open_tracker
from zenith_tracker.utils import filter_transactions, filter_transactions_by_month

CATEGORY_CHOICE = click.Choice([c.value for c in Category], case_sensitive=False)
DATE_TYPE = click.DateTime(formats=['%Y-%m-%d'])


def _category(value):
    if value is None:
        return None
    return next(c for c in Category if c.value.lower() == value.lower())


def _money(tracker, value):
    return f"{tracker.config.get('currency_symbol', '₹')}{format_amount(value)}"


@click.group()
@click.option(
    '--config', 'config_path',
    default=None,
    type=click.Path(dir_okay=False),
    help='Path to config.yaml (default: ~/.zenith/config.yaml or $ZENITH_CONFIG)'
)
@click.option(
    '--env-file', 'env_file',
    default=None,
    type=click.Path(exists=True, dir_okay=False),
    help='Optional .env file containing API tokens for AI providers'
)
@click.pass_context
def main(ctx, config_path, env_file):
    """
    Log expenses and ask questions about them. Totals, category breakdowns
    and recurring purchases are computed locally; a language model, when one
    is configured, only phrases the answer.
    """
    if env_file:
        load_dotenv(env_file)
    cfg = load_config(config_path)
    tracker = open_tracker(cfg)
    ctx.obj = tracker
    ctx.call_on_close(tracker.close)


# -----------------------------------------------------------------------------
# Transactions
# -----------------------------------------------------------------------------

@main.command()
@click.argument('amount', type=float)
@click.argument('item')
@click.option('--category', '-c', default='Other', type=CATEGORY_CHOICE, show_default=True)
@click.option('--vendor', '-v', default=None, help='Shop or merchant name')
@click.option('--date', '-d', 'when', default=None, type=DATE_TYPE, help='YYYY-MM-DD (default: today)')
@click.pass_obj
def add(tracker, amount, item, category, vendor, when):
    """Log an expense."""
    try:
        tracker.store.add(
            amount=amount,
            category=_category(category),
            item=item,
            vendor=vendor,
            date=when.date() if when else None,
        )
    except ValueError as e:
        raise click.BadParameter(str(e))
    tracker.changed()
    click.echo(f"✅ Added {_money(tracker, amount)} · {item.strip()}")


@main.command()
@click.argument('tx_id', type=int)
@click.option('--amount', type=float, default=None)
@click.option('--item', default=None)
@click.option('--category', '-c', default=None, type=CATEGORY_CHOICE)
@click.option('--vendor', '-v', default=None, help="Use '' to clear the vendor")
@click.option('--date', '-d', 'when', default=None, type=DATE_TYPE)
@click.pass_obj
def edit(tracker, tx_id, amount, item, category, vendor, when):
    """Change fields of an existing expense."""
    changes = {}
    if amount is not None:
        changes['amount'] = amount
    if item is not None:
        changes['item'] = item
    if category is not None:
        changes['category'] = _category(category)
    if vendor is not None:
        changes['vendor'] = vendor
    if when is not None:
        changes['date'] = when.date()
    if not changes:
        raise click.UsageError('Nothing to change.')
    if not any(t.id == tx_id for t in tracker.store.transactions):
        click.echo(f"No transaction with id {tx_id}.", err=True)
        return
    try:
        tracker.store.update(tx_id, **changes)
    except ValueError as e:
        raise click.BadParameter(str(e))
    tracker.changed()
    click.echo('✅ Transaction updated')


@main.command()
@click.argument('tx_id', type=int)
@click.pass_obj
def delete(tracker, tx_id):
    """Delete an expense."""
    tracker.store.remove(tx_id)
    tracker.changed()
    click.echo('🗑️ Deleted')


@main.command(name='list')
@click.option('--search', '-s', default=None, help='Match item or vendor text')
@click.option('--category', '-c', default=None, type=CATEGORY_CHOICE)
@click.option('--month', '-m', default=None, help='Only this YYYY-MM')
@click.option('--limit', '-n', default=None, type=int)
@click.pass_obj
def list_cmd(tracker, search, category, month, limit):
    """List expenses, most recently entered first."""
    txs = filter_transactions(tracker.store.get_all(), search, _category(category))
    if month:
        try:
            txs = filter_transactions_by_month(txs, month)
        except ValueError:
            raise click.BadParameter(f"expected YYYY-MM, got {month!r}", param_hint="'--month'")
    if limit is not None:
        txs = txs[:limit]
    if not txs:
        click.echo('No transactions.')
        return
    for tx in txs:
        vendor = f" at {tx.vendor}" if tx.vendor else ''
        click.echo(
            f"#{tx.id:<4} {tx.date.isoformat()}  {_money(tracker, tx.amount):>12}  "
            f"[{tx.category.value}] {tx.item}{vendor}"
        )


# -----------------------------------------------------------------------------
# Analytics
# -----------------------------------------------------------------------------

@main.command()
@click.pass_obj
def summary(tracker):
    """Last-30-day totals, this month's total, a health score and the category breakdown."""
    snap = tracker.cache.get_snapshot()
    last30 = snap.last_30_days
    click.echo(
        f"Last 30 days: {_money(tracker, last30.total)} across {last30.count} "
        f"transaction(s), avg {_money(tracker, last30.avg)}"
    )
    click.echo(f"This month:   {_money(tracker, snap.monthly_total)}")
    health = get_health(last30, snap.categories, tracker.config.get('currency_symbol', '₹'))
    click.echo(f"Health score: {health.score}/100 ({health.label})")
    for line in health.tips:
        click.echo(f"  • {line}")
    if snap.categories:
        click.echo('By category:')
        for row in snap.categories:
            click.echo(f"  {row.category.value:<14} {_money(tracker, row.amount):>12}  ({row.count})")


@main.command()
@click.pass_obj
def recurring(tracker):
    """Repeat purchases from the last 90 days plus manually entered bills."""
    snap = tracker.cache.get_snapshot()
    if not snap.recurring:
        click.echo('No recurring purchases detected in the last 90 days.')
    for group in snap.recurring:
        click.echo(
            f'"{group.name}" [{group.category.value}] {group.count}x, '
            f"{_money(tracker, group.total)} total, avg {_money(tracker, group.avg)}"
        )
    bills = tracker.bills.list()
    total = monthly_commitment(bills, snap.recurring)
    click.echo(f"Estimated monthly commitment: {_money(tracker, total)}")


# -----------------------------------------------------------------------------
# Questions
# -----------------------------------------------------------------------------

@main.command()
@click.argument('question')
@click.pass_obj
def facts(tracker, question):
    """Answer from computed figures only, without a language model."""
    answer = resolve(
        question,
        tracker.cache.get_snapshot,
        tracker.config.get('currency_symbol', '₹'),
    )
    if answer is None:
        click.echo('No direct answer for that question; try `zenith ask`.')
        return
    click.echo(answer)


@main.command()
@click.argument('question')
@click.pass_obj
def ask(tracker, question):
    """Ask the coach; the reply streams as it is generated."""
    coach = tracker.coach(load_provider())
    streamed = []

    def on_token(token):
        streamed.append(token)
        click.echo(token, nl=False)

    answer = coach.get_advice(question, on_token=on_token)
    # The final answer can differ from what streamed (guards, fallbacks).
    if ''.join(streamed).strip() != answer:
        if streamed:
            click.echo()
        click.echo(answer)
    else:
        click.echo()


@main.command()
@click.pass_obj
def tip(tracker):
    """One money-saving tip based on recent spending."""
    click.echo(tracker.coach(load_provider()).get_tip())


# -----------------------------------------------------------------------------
# Manual bills
# -----------------------------------------------------------------------------

@main.group()
def bills():
    """Bills entered by hand (rent, subscriptions not logged as expenses)."""


@bills.command(name='add')
@click.argument('name')
@click.argument('amount', type=float)
@click.option('--cycle', default='monthly', type=click.Choice([c.value for c in BillCycle]), show_default=True)
@click.option('--category', '-c', default='Other', show_default=True)
@click.pass_obj
def bills_add(tracker, name, amount, cycle, category):
    try:
        bill = tracker.bills.add(name, amount, cycle=cycle, category=category)
    except ValueError as e:
        raise click.BadParameter(str(e))
    click.echo(f"Added bill {bill.id}: {bill.name} {_money(tracker, bill.amount)}/{bill.cycle.value}")


@bills.command(name='list')
@click.pass_obj
def bills_list(tracker):
    items = tracker.bills.list()
    if not items:
        click.echo('No bills.')
        return
    for bill in items:
        click.echo(
            f"{bill.id}  {bill.name:<20} {_money(tracker, bill.amount):>10}/{bill.cycle.value:<8}"
            f" ≈ {_money(tracker, bill.monthly)}/month  [{bill.category}]"
        )


@bills.command(name='remove')
@click.argument('bill_id')
@click.pass_obj
def bills_remove(tracker, bill_id):
    tracker.bills.remove(bill_id)
    click.echo('🗑️ Bill removed')


@main.command()
@click.confirmation_option(prompt='Delete every transaction and bill?')
@click.pass_obj
def reset(tracker):
    """Erase all saved data."""
    tracker.store.clear()
    tracker.bills.clear()
    tracker.changed()
    click.echo('All data erased.')
