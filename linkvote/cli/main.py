"""CLI commands for posting, voting and listing articles."""

import json
import logging

import click
import structlog

from linkvote.board import ArticleBoard
from linkvote.catalog import Article
from linkvote.observability import configure_logging
from linkvote.settings import get_settings
from linkvote.voting import VoteResult


logger = structlog.get_logger()

ORDER_CHOICES = click.Choice(["score", "time"], case_sensitive=False)


def _echo_articles(articles: list[Article]) -> None:
    click.echo(json.dumps([a.to_dict() for a in articles], indent=2))


def _echo_vote(result: VoteResult) -> None:
    click.echo(
        json.dumps(
            {
                "article": result.article,
                "user": result.user,
                "action": result.action.value,
                "accepted": result.accepted,
                "outcome": result.outcome.value,
            }
        )
    )


@click.group()
@click.version_option(version="0.1.0")
@click.option(
    "--redis-url",
    default=None,
    help="Redis URL (default: LINKVOTE_REDIS_URL or redis://localhost:6379/0).",
)
@click.option(
    "--json-logs/--no-json-logs",
    default=None,
    help="Use JSON format for logs (default: LINKVOTE_JSON_LOGS or true).",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose logging.",
)
@click.pass_context
def cli(
    ctx: click.Context,
    redis_url: str | None,
    json_logs: bool | None,
    verbose: bool,
) -> None:
    """Vote-ranked link board CLI."""
    overrides: dict[str, object] = {}
    if redis_url is not None:
        overrides["redis_url"] = redis_url
    if json_logs is not None:
        overrides["json_logs"] = json_logs
    settings = get_settings(**overrides)

    level = logging.DEBUG if verbose else settings.log_level
    configure_logging(level=level, json_format=settings.json_logs)

    # ``obj`` may carry a board factory (tests, embedding). It runs only after
    # logging is configured, since components bind their loggers on creation.
    board_factory = ctx.obj or ArticleBoard.from_settings
    ctx.obj = board_factory(settings)


@cli.command()
@click.argument("user")
@click.argument("title")
@click.argument("link")
@click.pass_obj
def post(board: ArticleBoard, user: str, title: str, link: str) -> None:
    """Post a new article and print its id."""
    article_id = board.post_article(user, title, link)
    click.echo(json.dumps({"id": article_id, "key": board.keys.article(article_id)}))


@cli.command()
@click.argument("article")
@click.argument("user")
@click.pass_obj
def vote(board: ArticleBoard, article: str, user: str) -> None:
    """Up-vote ARTICLE (e.g. article:1) as USER."""
    _echo_vote(board.article_vote(article, user))


@cli.command()
@click.argument("article")
@click.argument("user")
@click.pass_obj
def disvote(board: ArticleBoard, article: str, user: str) -> None:
    """Down-vote ARTICLE as USER."""
    _echo_vote(board.article_disvote(article, user))


@cli.command()
@click.argument("article")
@click.argument("user")
@click.pass_obj
def exchange(board: ArticleBoard, article: str, user: str) -> None:
    """Flip USER's existing vote on ARTICLE."""
    _echo_vote(board.exchange_vote(article, user))


@cli.command("list")
@click.option("--page", default=1, show_default=True, type=click.IntRange(min=1))
@click.option("--order", default="score", show_default=True, type=ORDER_CHOICES)
@click.pass_obj
def list_articles(board: ArticleBoard, page: int, order: str) -> None:
    """List a page of articles from a global view."""
    _echo_articles(board.get_articles(page, order))


@cli.command()
@click.argument("article_id")
@click.option("--add", "to_add", multiple=True, help="Group to add to.")
@click.option("--remove", "to_remove", multiple=True, help="Group to remove from.")
@click.pass_obj
def groups(
    board: ArticleBoard,
    article_id: str,
    to_add: tuple[str, ...],
    to_remove: tuple[str, ...],
) -> None:
    """Add ARTICLE_ID to groups or remove it from them."""
    board.add_remove_groups(article_id, to_add, to_remove)
    click.echo(
        json.dumps({"id": article_id, "added": list(to_add), "removed": list(to_remove)})
    )


@cli.command("group-list")
@click.argument("group")
@click.option("--page", default=1, show_default=True, type=click.IntRange(min=1))
@click.option("--order", default="score", show_default=True, type=ORDER_CHOICES)
@click.pass_obj
def group_list(board: ArticleBoard, group: str, page: int, order: str) -> None:
    """List a page of GROUP's articles ranked by a global view."""
    _echo_articles(board.get_group_articles(group, order, page))


@cli.command()
@click.confirmation_option(
    "--yes", prompt="Delete every key in this board's namespace?"
)
@click.pass_obj
def reset(board: ArticleBoard) -> None:
    """Delete all articles, votes, views and groups in the namespace."""
    deleted = board.reset()
    logger.info("reset_complete", component="cli", keys_deleted=deleted)
    click.echo(json.dumps({"keys_deleted": deleted}))


if __name__ == "__main__":
    cli()
