"""Typer CLI — ``catcircle`` commands over local storage (or a remote API)."""

from __future__ import annotations

import asyncio
import logging
import os
import sys
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

import typer
from dotenv import load_dotenv
from rich.table import Table

from catcircle.config import load_config_or_default
from catcircle.errors import CatCircleError
from catcircle.matching import MatchScorer
from catcircle.schemas.config import AppConfig
from catcircle.schemas.feed import PostType
from catcircle.schemas.profiles import OwnerProfile
from catcircle.shared.api_client import ApiClient
from catcircle.shared.fixtures import CAT_BREEDS
from catcircle.shared.progress import StepProgress, ask_user, console, print_panel
from catcircle.shared.storage import JsonFileStore, LocalDB

# Load .env file from project root (if it exists)
load_dotenv()

app = typer.Typer(
    name="catcircle",
    help="CatCircle — a social network for cat owners, with an AI care assistant.",
    no_args_is_help=True,
)
community_app = typer.Typer(help="List, create and join communities.", no_args_is_help=True)
cat_app = typer.Typer(help="Manage your cats.", no_args_is_help=True)
app.add_typer(community_app, name="community")
app.add_typer(cat_app, name="cat")


@dataclass
class _Options:
    config: Path | None = None
    dry_run: bool = False


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
        datefmt="%H:%M:%S",
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


@app.callback()
def main(
    ctx: typer.Context,
    config: Path = typer.Option(None, "--config", "-c", help="Path to catcircle.yml (default: ./catcircle.yml if present)."),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Use canned assistant responses (no OpenAI calls)."),
) -> None:
    _setup_logging(verbose)
    ctx.obj = _Options(config=config, dry_run=dry_run)


# ----------------------------------------------------------------------
# Wiring
# ----------------------------------------------------------------------


@contextmanager
def _user_errors() -> Iterator[None]:
    """Turn CatCircle errors into a red one-liner and exit code 1."""
    try:
        yield
    except CatCircleError as exc:
        console.print(f"[red]Error:[/] {exc}")
        raise typer.Exit(code=1)


def _load(ctx: typer.Context) -> tuple[AppConfig, LocalDB]:
    opts: _Options = ctx.obj
    try:
        cfg = load_config_or_default(opts.config)
    except Exception as exc:
        console.print(f"[red]Config validation failed:[/] {exc}")
        raise typer.Exit(code=1)

    if base_url := os.environ.get("CATCIRCLE_API_URL"):
        cfg.api.base_url = base_url

    db = LocalDB(JsonFileStore(cfg.storage_path))
    with _user_errors():
        db.init()
        if token := os.environ.get("CATCIRCLE_API_TOKEN"):
            db.set_token(token)
    return cfg, db


def _api(cfg: AppConfig, db: LocalDB) -> ApiClient:
    return ApiClient(db, settings=cfg.api, scorer=MatchScorer(cfg.matching))


def _require_user(db: LocalDB) -> OwnerProfile:
    from catcircle.services.auth import AuthService

    with _user_errors():
        return AuthService(db).require_user()


def _completion_client(ctx: typer.Context, cfg: AppConfig):
    if ctx.obj.dry_run:
        from catcircle.shared.llm_client import DryRunClient

        console.print("[yellow]DRY-RUN mode — no API calls will be made.[/]\n")
        return DryRunClient()

    api_key = os.environ.get("OPENAI_API_KEY")
    if not api_key:
        console.print("[red]OPENAI_API_KEY is not set.[/] Add it to .env or pass --dry-run.")
        raise typer.Exit(code=1)

    from catcircle.shared.llm_client import LLMClient

    return LLMClient(api_key, model=cfg.assistant.advice_model, max_tokens=cfg.assistant.max_tokens)


def _assistant(ctx: typer.Context, cfg: AppConfig, db: LocalDB):
    from catcircle.assistant.agent import CatAssistant

    return CatAssistant(_completion_client(ctx, cfg), db.get_products(), settings=cfg.assistant)


def _print_post(post, db: LocalDB) -> None:
    owner = db.find_user_or_default(post.owner_id)
    header = f"[bold]{owner.account_name}[/] [dim]{post.id} · {post.type.value}[/]"
    if post.risk_level:
        header += f" [magenta]risk: {post.risk_level.value}[/]"
    console.print(header)
    console.print(post.content, markup=False)
    if post.tags:
        console.print("[cyan]" + " ".join(f"#{t}" for t in post.tags) + "[/]")
    console.print(f"[dim]♥ {post.likes}   🪙 {post.tips}   💬 {len(post.comments)}[/]\n")


# ----------------------------------------------------------------------
# Config / account
# ----------------------------------------------------------------------


@app.command()
def validate(ctx: typer.Context) -> None:
    """Validate the configuration file and show the effective settings."""
    cfg, _ = _load(ctx)
    console.print("[green]Config is valid![/]\n")
    console.print(f"  Storage:     {cfg.storage_path}")
    console.print(f"  API:         {cfg.api.base_url or '(local only)'}")
    m = cfg.matching
    console.print(f"  Matching:    base {m.base}, +{m.interest_weight}/interest, jitter {m.jitter}, max {m.ceiling}")
    console.print(f"  Models:      {cfg.assistant.advice_model} (advice), {cfg.assistant.fast_model} (triage/drafts)")
    console.print(f"  Rewards:     +{cfg.rewards.post_reward} per post, {cfg.rewards.signup_balance} on sign-up")


@app.command()
def signup(
    ctx: typer.Context,
    name: str = typer.Option(..., "--name", "-n", help="Account name."),
    email: str = typer.Option(..., "--email", "-e"),
    cat: str = typer.Option(..., "--cat", help="Your cat's name."),
    breed: str = typer.Option("Other", "--breed", "-b", help=f"One of: {', '.join(CAT_BREEDS)}."),
) -> None:
    """Create an account (with one cat) and sign in."""
    from catcircle.services.auth import AuthService

    cfg, db = _load(ctx)
    with _user_errors():
        user = AuthService(db, rewards=cfg.rewards).sign_up(name, email, cat, breed)
    console.print(f"[green]Welcome to CatCircle, {user.account_name}![/] You start with {user.coin_balance} coins.")


@app.command()
def signin(ctx: typer.Context, identifier: str = typer.Argument(..., help="Account name or email.")) -> None:
    """Sign in by account name or email."""
    from catcircle.services.auth import AuthService
    from catcircle.services.session import load_session

    cfg, db = _load(ctx)
    with _user_errors():
        user = AuthService(db).sign_in(identifier)

    async def _run() -> None:
        async with _api(cfg, db) as api:
            session = await load_session(api, user.id)
        console.print(f"[green]Signed in as {session.user.account_name}[/] ({session.user.coin_balance} coins)")
        console.print(
            f"  {len(session.purchases)} purchases · following {len(session.following)} · "
            f"{len(session.messages)} conversations"
        )

    with _user_errors():
        asyncio.run(_run())


@app.command()
def signout(ctx: typer.Context) -> None:
    """Forget the current session."""
    from catcircle.services.auth import AuthService

    _, db = _load(ctx)
    AuthService(db).sign_out()
    console.print("Signed out.")


@app.command()
def whoami(ctx: typer.Context) -> None:
    """Show the signed-in owner, their cats and balance."""
    from catcircle.services.session import load_session

    cfg, db = _load(ctx)
    user = _require_user(db)

    async def _run() -> None:
        async with _api(cfg, db) as api:
            session = await load_session(api, user.id)
        u = session.user
        console.print(f"[bold]{u.account_name}[/] [dim]({u.id})[/]  🪙 {u.coin_balance}")
        if u.bio:
            console.print(u.bio)
        console.print(f"Followers {u.followers_count} · Following {len(session.following)}")
        for c in u.cats:
            console.print(f"  🐈 {c.name} [dim]({c.id})[/] — {c.breed}, {c.age}y, {c.gender}")
        if u.interests:
            console.print(f"Interests: {', '.join(u.interests)}")
        if session.purchases:
            console.print(f"{len(session.purchases)} purchase(s), latest: {session.purchases[0].product.name}")

    with _user_errors():
        asyncio.run(_run())


@app.command()
def edit(
    ctx: typer.Context,
    name: str = typer.Option(None, "--name", "-n"),
    bio: str = typer.Option(None, "--bio"),
    avatar: str = typer.Option(None, "--avatar"),
    interest: list[str] = typer.Option(None, "--interest", "-i", help="Replace interests (repeatable)."),
) -> None:
    """Edit your owner profile."""
    from catcircle.services.profile import ProfileService

    cfg, db = _load(ctx)
    user = _require_user(db)
    changes = {k: v for k, v in {"account_name": name, "bio": bio, "avatar": avatar}.items() if v is not None}
    if interest:
        changes["interests"] = list(interest)
    if not changes:
        console.print("Nothing to change.")
        return

    async def _run() -> None:
        async with _api(cfg, db) as api:
            await ProfileService(api).update_owner(user, **changes)
        console.print("[green]Profile updated.[/]")

    with _user_errors():
        asyncio.run(_run())


# ----------------------------------------------------------------------
# Cats
# ----------------------------------------------------------------------


@cat_app.command("add")
def cat_add(
    ctx: typer.Context,
    name: str = typer.Argument(...),
    breed: str = typer.Option("Other", "--breed", "-b", help=f"One of: {', '.join(CAT_BREEDS)}."),
    age: int = typer.Option(1, "--age"),
    gender: str = typer.Option("Female", "--gender", help="Male or Female."),
) -> None:
    """Add a cat to your profile."""
    from catcircle.services.profile import ProfileService

    cfg, db = _load(ctx)
    user = _require_user(db)

    async def _run() -> None:
        async with _api(cfg, db) as api:
            cat = await ProfileService(api).add_cat(user, name, breed, age=age, gender=gender.capitalize())
        console.print(f"[green]Added {cat.name}[/] ({cat.id}).")

    with _user_errors():
        asyncio.run(_run())


@cat_app.command("update")
def cat_update(
    ctx: typer.Context,
    cat_id: str = typer.Argument(...),
    name: str = typer.Option(None, "--name"),
    breed: str = typer.Option(None, "--breed"),
    age: int = typer.Option(None, "--age"),
    bio: str = typer.Option(None, "--bio"),
) -> None:
    """Change a cat's details."""
    from catcircle.services.profile import ProfileService

    cfg, db = _load(ctx)
    user = _require_user(db)
    changes = {k: v for k, v in {"name": name, "breed": breed, "age": age, "bio": bio}.items() if v is not None}

    async def _run() -> None:
        async with _api(cfg, db) as api:
            await ProfileService(api).update_cat(user, cat_id, **changes)
        console.print(f"[green]Updated {cat_id}.[/]")

    with _user_errors():
        asyncio.run(_run())


@cat_app.command("remove")
def cat_remove(ctx: typer.Context, cat_id: str = typer.Argument(...)) -> None:
    """Remove a cat from your profile."""
    from catcircle.services.profile import ProfileService

    cfg, db = _load(ctx)
    user = _require_user(db)

    async def _run() -> None:
        async with _api(cfg, db) as api:
            await ProfileService(api).delete_cat(user, cat_id)
        console.print(f"Removed {cat_id}.")

    with _user_errors():
        asyncio.run(_run())


# ----------------------------------------------------------------------
# Feed
# ----------------------------------------------------------------------


@app.command()
def feed(
    ctx: typer.Context,
    search: str = typer.Option(None, "--search", "-s", help="Text, owner name, or #tag for an exact tag match."),
    limit: int = typer.Option(20, "--limit", "-l"),
    html: Path = typer.Option(None, "--html", help="Also write the listed posts to an HTML file."),
) -> None:
    """Show the feed."""
    from catcircle.output.render import render_feed_html
    from catcircle.services.feed import FeedService

    cfg, db = _load(ctx)

    async def _run() -> None:
        async with _api(cfg, db) as api:
            service = FeedService(api, rewards=cfg.rewards)
            posts = await (service.search(search) if search else service.list_posts())
            communities = await api.get_communities()
        posts = posts[:limit]
        if not posts:
            console.print("No posts found.")
        for post in posts:
            _print_post(post, db)
        if html:
            html.write_text(
                render_feed_html(posts, db.get_users(), communities, title=search or "Feed"),
                encoding="utf-8",
            )
            console.print(f"[green]HTML feed written to:[/] {html}")

    with _user_errors():
        asyncio.run(_run())


@app.command()
def challenges(ctx: typer.Context) -> None:
    """List the active challenges and their bonus rewards."""
    from catcircle.services.feed import FeedService, time_left

    cfg, db = _load(ctx)
    active = FeedService(_api(cfg, db), rewards=cfg.rewards).challenges()
    if not active:
        console.print("No active challenges right now.")
        return

    table = Table(title="Challenges")
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("Challenge", style="bold")
    table.add_column("Tag", style="cyan", no_wrap=True)
    table.add_column("Reward", justify="right", no_wrap=True)
    table.add_column("Time left", no_wrap=True)
    for ch in active:
        table.add_row(ch.id, f"{ch.title}\n[dim]{ch.description}[/]", ch.tag, f"🪙 {ch.reward}", time_left(ch))
    console.print(table)
    console.print("Join one with: catcircle post \"...\" --challenge <ID>")


@app.command()
def post(
    ctx: typer.Context,
    content: str = typer.Argument(..., help="What's happening with your cat?"),
    post_type: PostType = typer.Option(PostType.DAILY, "--type", "-t", case_sensitive=False),
    tag: list[str] = typer.Option(None, "--tag", help="Tag (repeatable)."),
    cat_id: str = typer.Option(None, "--cat", help="Cat id (default: your first cat)."),
    community: str = typer.Option(None, "--community", help="Community id to post in."),
    image: str = typer.Option(None, "--image", help="Image URL."),
    challenge: str = typer.Option(None, "--challenge", help="Challenge id; adds its tag."),
    polish: bool = typer.Option(False, "--polish", help="Let the assistant polish the text first."),
    style: str = typer.Option("Cute", "--style", help="Cute, Witty, Pro or Story."),
) -> None:
    """Publish a post (earns coins)."""
    from catcircle.assistant.prompts import STYLE_INSTRUCTIONS
    from catcircle.services.feed import FeedService

    cfg, db = _load(ctx)
    user = _require_user(db)
    style = style.capitalize()
    if style not in STYLE_INSTRUCTIONS:
        console.print(f"[red]Unknown style {style!r}.[/] Choose one of: {', '.join(STYLE_INSTRUCTIONS)}")
        raise typer.Exit(code=1)

    async def _run() -> None:
        text = content
        risk = None
        if polish:
            assistant = _assistant(ctx, cfg, db)
            with StepProgress("Polishing draft"):
                outcome = await assistant.draft_with_triage(content, post_type, style)
            if outcome.warning:
                console.print(f"[yellow]⚠️  {outcome.warning}[/]")
                console.print('Try: catcircle ask "<your question>"')
                raise typer.Exit(code=1)
            text = outcome.text or content
            risk = outcome.triage.risk_level if outcome.triage else None

        async with _api(cfg, db) as api:
            service = FeedService(api, rewards=cfg.rewards)
            tags = list(tag or [])
            if challenge:
                tags.append(service.challenge_tag(challenge))
            created, author = await service.create_post(
                user,
                text,
                post_type,
                cat_id=cat_id,
                community_id=community,
                media_url=image,
                tags=tags,
                risk_level=risk,
            )
        _print_post(created, db)
        console.print(f"[green]Published![/] +{cfg.rewards.post_reward} coins (balance {author.coin_balance}).")

    with _user_errors():
        asyncio.run(_run())


@app.command()
def like(ctx: typer.Context, post_id: str = typer.Argument(...)) -> None:
    """Like a post."""
    from catcircle.services.feed import FeedService

    cfg, db = _load(ctx)
    with _user_errors():
        updated = FeedService(_api(cfg, db)).like(post_id)
    console.print(f"♥ {updated.likes}")


@app.command()
def comment(ctx: typer.Context, post_id: str = typer.Argument(...), text: str = typer.Argument(...)) -> None:
    """Comment on a post."""
    from catcircle.services.feed import FeedService

    cfg, db = _load(ctx)
    user = _require_user(db)
    with _user_errors():
        updated = FeedService(_api(cfg, db)).comment(post_id, user, text)
    console.print(f"💬 {len(updated.comments)} comment(s) on {post_id}")


@app.command()
def tip(ctx: typer.Context, post_id: str = typer.Argument(...), amount: int = typer.Argument(...)) -> None:
    """Tip coins to a post."""
    from catcircle.services.feed import FeedService

    cfg, db = _load(ctx)
    user = _require_user(db)

    async def _run() -> None:
        async with _api(cfg, db) as api:
            updated, tipper = await FeedService(api).tip(post_id, user, amount)
        console.print(f"🪙 Tipped {amount}. Post total: {updated.tips}. Your balance: {tipper.coin_balance}")

    with _user_errors():
        asyncio.run(_run())


# ----------------------------------------------------------------------
# Discover / social
# ----------------------------------------------------------------------


@app.command()
def discover(ctx: typer.Context, limit: int = typer.Option(10, "--limit", "-l")) -> None:
    """Owners you might get along with."""
    from catcircle.services.social import SocialService

    cfg, db = _load(ctx)
    _require_user(db)

    async def _run() -> None:
        async with _api(cfg, db) as api:
            matches = await SocialService(api).discover()
        table = Table(title="Recommended owners")
        table.add_column("Score", justify="right")
        table.add_column("Owner")
        table.add_column("Cat")
        table.add_column("Why")
        for m in matches[:limit]:
            cat = m.owner.primary_cat
            table.add_row(
                f"{m.match_score}%",
                f"{m.owner.account_name} [dim]({m.owner.id})[/]",
                f"{cat.name} ({cat.breed})" if cat else "-",
                m.reason.strip(),
            )
        console.print(table)

    with _user_errors():
        asyncio.run(_run())


@app.command()
def follow(ctx: typer.Context, owner_id: str = typer.Argument(...)) -> None:
    """Follow an owner, or unfollow if you already do."""
    from catcircle.services.social import SocialService

    cfg, db = _load(ctx)
    user = _require_user(db)

    async def _run() -> None:
        async with _api(cfg, db) as api:
            following = await SocialService(api).toggle_follow(user, owner_id)
        console.print(f"{'Following' if following else 'Unfollowed'} {owner_id}.")

    with _user_errors():
        asyncio.run(_run())


@app.command()
def dm(
    ctx: typer.Context,
    peer_id: str = typer.Argument(...),
    text: str = typer.Argument(None),
    image: str = typer.Option(None, "--image"),
) -> None:
    """Send a direct message (or show the thread if no text is given)."""
    from catcircle.services.social import SocialService

    cfg, db = _load(ctx)
    user = _require_user(db)
    with _user_errors():
        if text or image:
            thread = SocialService(_api(cfg, db)).send_direct(user, peer_id, text, image_url=image)
        else:
            thread = db.get_chat_messages(user.id).get(peer_id, [])
    for msg in thread:
        who = "you" if msg.sender_id == user.id else db.find_user_or_default(msg.sender_id).account_name
        console.print(f"[bold]{who}:[/] {msg.text or ''}{' 🖼 ' + msg.image_url if msg.image_url else ''}")


@community_app.command("list")
def community_list(ctx: typer.Context) -> None:
    """List communities."""
    cfg, db = _load(ctx)

    async def _run() -> None:
        async with _api(cfg, db) as api:
            communities = await api.get_communities()
        for c in communities:
            console.print(f"[bold]{c.name}[/] [dim]({c.id}, {len(c.member_ids)} members)[/]")
            if c.description:
                console.print(f"  {c.description}")

    with _user_errors():
        asyncio.run(_run())


@community_app.command("create")
def community_create(
    ctx: typer.Context,
    name: str = typer.Argument(...),
    description: str = typer.Option("", "--description", "-d"),
    breed: str = typer.Option(None, "--breed"),
) -> None:
    """Create a community (you become its first member)."""
    from catcircle.services.social import SocialService

    cfg, db = _load(ctx)
    user = _require_user(db)

    async def _run() -> None:
        async with _api(cfg, db) as api:
            created = await SocialService(api).create_community(user, name, description, breed_tag=breed)
        console.print(f"[green]Created {created.name}[/] ({created.id}).")

    with _user_errors():
        asyncio.run(_run())


@community_app.command("join")
def community_join(ctx: typer.Context, community_id: str = typer.Argument(...)) -> None:
    """Join a community."""
    from catcircle.services.social import SocialService

    cfg, db = _load(ctx)
    user = _require_user(db)
    with _user_errors():
        joined = SocialService(_api(cfg, db)).join_community(user, community_id)
    console.print(f"You're in {joined.name} ({len(joined.member_ids)} members).")


@community_app.command("say")
def community_say(
    ctx: typer.Context,
    community_id: str = typer.Argument(...),
    text: str = typer.Argument(...),
) -> None:
    """Post a message in a community's group chat."""
    from catcircle.services.social import SocialService

    cfg, db = _load(ctx)
    user = _require_user(db)
    with _user_errors():
        thread = SocialService(_api(cfg, db)).send_group(user, community_id, text)
    console.print(f"Sent ({len(thread)} message(s) in the group).")


# ----------------------------------------------------------------------
# Mall
# ----------------------------------------------------------------------


@app.command()
def products(ctx: typer.Context) -> None:
    """List mall products."""
    from catcircle.services.mall import average_rating

    _, db = _load(ctx)
    table = Table(title="Cat Mall")
    table.add_column("ID")
    table.add_column("Product")
    table.add_column("USD", justify="right")
    table.add_column("Coins", justify="right")
    table.add_column("Rating", justify="right")
    for p in db.get_products():
        table.add_row(p.id, p.name, f"${p.usd_price:.2f}", str(p.cat_coin_price), f"{average_rating(p)} ({len(p.reviews)})")
    console.print(table)


@app.command()
def buy(
    ctx: typer.Context,
    product_id: str = typer.Argument(...),
    method: str = typer.Option("Coins", "--method", "-m", help="Coins or USD."),
) -> None:
    """Buy a product with coins or (simulated) card payment."""
    from catcircle.services.mall import MallService

    cfg, db = _load(ctx)
    user = _require_user(db)
    normalized = "USD" if method.upper() == "USD" else "Coins" if method.lower() == "coins" else None
    if normalized is None:
        console.print(f"[red]Unknown payment method {method!r}.[/] Use Coins or USD.")
        raise typer.Exit(code=1)

    async def _run() -> None:
        async with _api(cfg, db) as api:
            with StepProgress("Checkout") as progress:
                mall = MallService(api, payment=cfg.payment, on_step=lambda step: progress.status(step.value))
                record, buyer = await mall.purchase(user, product_id, normalized)
        console.print(
            f"[green]Bought {record.product.name}[/] for {record.amount_paid} {record.payment_method}. "
            f"Balance: {buyer.coin_balance} coins."
        )

    with _user_errors():
        asyncio.run(_run())


@app.command()
def topup(ctx: typer.Context, coins: int = typer.Argument(..., help="Package size: 500, 1200, 3000 or 7000.")) -> None:
    """Buy a coin package by (simulated) card payment."""
    from catcircle.services.mall import MallService

    cfg, db = _load(ctx)
    user = _require_user(db)

    async def _run() -> None:
        async with _api(cfg, db) as api:
            with StepProgress("Checkout") as progress:
                mall = MallService(api, payment=cfg.payment, on_step=lambda step: progress.status(step.value))
                updated = await mall.top_up(user, coins)
        console.print(f"[green]+{coins} coins.[/] Balance: {updated.coin_balance}")

    with _user_errors():
        asyncio.run(_run())


@app.command()
def review(
    ctx: typer.Context,
    product_id: str = typer.Argument(...),
    rating: int = typer.Argument(..., min=1, max=5),
    text: str = typer.Argument(...),
) -> None:
    """Rate and review a product."""
    from catcircle.services.mall import MallService, average_rating

    cfg, db = _load(ctx)
    user = _require_user(db)
    with _user_errors():
        product = MallService(_api(cfg, db)).add_review(user, product_id, rating, text)
    console.print(f"Thanks! {product.name} is now rated {average_rating(product)} ({len(product.reviews)} reviews).")


# ----------------------------------------------------------------------
# Assistant
# ----------------------------------------------------------------------


def _print_reply(assistant, reply) -> None:
    meta = reply.metadata
    if meta is None:
        console.print(reply.content, style="yellow", markup=False)
        return
    color = {"Low": "green", "Medium": "yellow", "High": "red"}[meta.risk_level.value]
    console.print(f"[{color}]Risk: {meta.risk_level.value}[/]\n")
    console.print(reply.content, markup=False)
    if meta.actionable_steps:
        console.print("\n[bold]Steps:[/]")
        for step in meta.actionable_steps:
            console.print(f"  • {step}", markup=False)
    if meta.citations:
        console.print(f"\nSources: {', '.join(meta.citations)}", style="dim", markup=False)
    for product in assistant.recommended_products(reply):
        console.print(f"[cyan]🛒 {product.name}[/] ({product.id}) — ${product.usd_price:.2f} / {product.cat_coin_price} coins")


async def _share(assistant, reply, user: OwnerProfile, cfg: AppConfig, db: LocalDB) -> None:
    async with _api(cfg, db) as api:
        created = await api.create_post(assistant.share_summary(reply, user))
    console.print(f"[green]Shared to the feed[/] as {created.id}.")


@app.command()
def ask(
    ctx: typer.Context,
    question: str = typer.Argument(None, help="Omit to start an interactive session."),
    share: bool = typer.Option(False, "--share", help="Share the answer to the feed as a care tip."),
) -> None:
    """Ask the AI assistant about your cat's health or behavior.

    In an interactive session, type /share to share the last answer and
    /quit to leave.
    """
    from catcircle.assistant.prompts import WELCOME_MESSAGE

    cfg, db = _load(ctx)
    user = _require_user(db)
    assistant = _assistant(ctx, cfg, db)

    async def _one(query: str, history: list):
        with StepProgress("Consulting the vet knowledge base") as progress:
            reply = await assistant.ask(query, history)
            if reply.metadata is None:
                progress.fail("no answer")
        _print_reply(assistant, reply)
        return reply

    async def _run() -> None:
        history: list = []
        if question:
            reply = await _one(question, history)
            if share and reply.metadata is not None:
                await _share(assistant, reply, user, cfg, db)
            return

        if not sys.stdin.isatty():
            console.print("No question given. Pass one as an argument or run interactively.")
            return

        print_panel(WELCOME_MESSAGE, title=assistant.name)
        last = None
        while True:
            line = await ask_user("You")
            if line is None or line.strip() == "/quit":
                return
            if line.strip() == "/share":
                if last is None or last.metadata is None:
                    console.print("Nothing to share yet.")
                else:
                    await _share(assistant, last, user, cfg, db)
                continue
            if line.strip():
                last = await _one(line, history)

    with _user_errors():
        asyncio.run(_run())
