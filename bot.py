# bot.py
# Tap Sim stats bot: egg prices, value lookups, search, leaderboards, and an
# auto-posted hatches board that is only re-sent when it changes.
# Requires: discord.py, python-dotenv, aiohttp  (pip install -r requirements.txt)

import sys
import asyncio
import logging
from typing import Awaitable, Callable, Dict, List, NamedTuple, Optional, Tuple

import discord
from discord.ext import tasks

import queries
from queries import Entry, HatchesPoster
from changes import ChangeDetector
from records import resolve_field
from settings import ConfigError, Settings
from tapsim_api import TapSimAPI, UpstreamError

log = logging.getLogger("tapsimbot")

SOURCE_FOOTER = "Source: tapsim.gg"

# -----------------------------------------------------------------------------
# Command parsing
# -----------------------------------------------------------------------------

def parse_command(content: str, prefix: str = "!") -> Optional[Tuple[str, str]]:
    """'!Value  Golden Egg' -> ('value', 'Golden Egg'); None if not a command."""
    if not content or not content.startswith(prefix):
        return None
    parts = content[len(prefix):].split()
    if not parts:
        return None
    return parts[0].lower(), " ".join(parts[1:])

# -----------------------------------------------------------------------------
# Rendering
# -----------------------------------------------------------------------------

def fmt_num(value) -> str:
    if value is None:
        return "N/A"
    if isinstance(value, int):
        return f"{value:,}"
    return f"{value:,.2f}".rstrip("0").rstrip(".")


def make_embed(title: str, lines: List[str], sep: str = "\n\n", footer: str = SOURCE_FOOTER) -> discord.Embed:
    embed = discord.Embed(title=title, description=sep.join(lines))
    embed.set_footer(text=footer)
    return embed


def egg_lines(entries: List[Entry], emoji: str) -> List[str]:
    return [f"**{e.name}**\nPrice: {emoji} **{fmt_num(e.value)}**" for e in entries]


def hatches_board_embed(entries: List[Entry], settings: Settings) -> discord.Embed:
    return make_embed(
        "🥚 Tap Sim — Auto Hatch Update",
        egg_lines(entries, settings.click_emoji),
        footer=f"Updated every {settings.post_interval_minutes} minutes | tapsim.gg",
    )


class Reply(NamedTuple):
    content: Optional[str] = None
    embed: Optional[discord.Embed] = None
    as_reply: bool = False  # reply to the user instead of a plain channel send


def _error(text: str) -> Reply:
    return Reply(content=f"❌ {text}", as_reply=True)


def _not_found(query: str) -> Reply:
    return _error(f"No match found for **{query}**.")

# -----------------------------------------------------------------------------
# Commands
# -----------------------------------------------------------------------------

HELP_FIELDS = [
    ("!hatches", "Show eggs/hatches list"),
    ("!hatches <egg>", "Search eggs by name"),
    ("!value <pet>", "Value lookup"),
    ("!search <name>", "Search pets/items"),
    ("!topvalues", "Top 10 values"),
    ("!enchants", "Show enchants list"),
    ("!snipes", "Show plaza snipes"),
    ("!ads", "Show latest trade ads"),
]

Handler = Callable[[TapSimAPI, Settings, str], Awaitable[Reply]]


async def cmd_help(api: TapSimAPI, settings: Settings, query: str) -> Reply:
    embed = discord.Embed(title="📌 Tap Sim Bot Commands", description="Here are all commands:")
    for name, value in HELP_FIELDS:
        embed.add_field(name=settings.command_prefix + name[1:], value=value, inline=False)
    embed.set_footer(text=SOURCE_FOOTER)
    return Reply(embed=embed)


async def cmd_hatches(api: TapSimAPI, settings: Settings, query: str) -> Reply:
    entries = queries.hatches(await api.eggs(), query)
    if not entries:
        return _not_found(query) if query else _error("No eggs found.")
    return Reply(embed=make_embed("🥚 Tap Sim — Eggs / Hatches", egg_lines(entries, settings.click_emoji)))


async def cmd_value(api: TapSimAPI, settings: Settings, query: str) -> Reply:
    if not query:
        return _error(f"Use: `{settings.command_prefix}value <pet name>`")

    found = queries.value_lookup(await api.items(200), query)
    if not found.found:
        return _not_found(query)

    best = found.best
    exist = resolve_field(best.record, "exist")
    lines = [f"**{best.name}**\n\nValue: {settings.click_emoji} **{fmt_num(best.value)}**\nExist: **{fmt_num(exist)}**"]
    if found.alternatives and not found.exact:
        others = ", ".join(e.name for e in found.alternatives[:5])
        lines.append(f"_Also matched:_ {others}")
    return Reply(embed=make_embed("💎 Tap Sim — Value Lookup", lines))


async def cmd_search(api: TapSimAPI, settings: Settings, query: str) -> Reply:
    if not query:
        return _error(f"Use: `{settings.command_prefix}search <name>`")

    entries = queries.search(await api.items(300), query)
    if not entries:
        return _not_found(query)
    lines = [f"**{e.name}** → {settings.click_emoji} **{fmt_num(e.value)}**" for e in entries]
    return Reply(embed=make_embed("🔎 Tap Sim — Search Results", lines, sep="\n"))


async def cmd_topvalues(api: TapSimAPI, settings: Settings, query: str) -> Reply:
    entries = queries.top_values(await api.top_values())
    if not entries:
        return _error("No values returned.")
    lines = [f"**{e.rank}. {e.name}**\nValue: {settings.click_emoji} **{fmt_num(e.value)}**" for e in entries]
    return Reply(embed=make_embed("🏆 Tap Sim — Top 10 Values", lines))


async def cmd_enchants(api: TapSimAPI, settings: Settings, query: str) -> Reply:
    entries = queries.enchants(await api.enchants())
    if not entries:
        return _error("No enchants returned.")
    lines = [f"**{e.name}** → {settings.click_emoji} **{fmt_num(e.value)}**" for e in entries]
    return Reply(embed=make_embed("✨ Tap Sim — Enchants", lines, sep="\n"))


async def cmd_snipes(api: TapSimAPI, settings: Settings, query: str) -> Reply:
    entries = queries.snipes(await api.snipes())
    if not entries:
        return _error("No snipes right now.")
    lines = []
    for e in entries:
        pct = resolve_field(e.record, "percent")
        lines.append(
            f"**{e.name}**\nPrice: {settings.click_emoji} **{fmt_num(e.value)}**\nPercent: **{fmt_num(pct)}%**"
        )
    return Reply(embed=make_embed("🎯 Tap Sim — Plaza Snipes", lines))


async def cmd_ads(api: TapSimAPI, settings: Settings, query: str) -> Reply:
    trade_ads = queries.ads(await api.ads())
    if not trade_ads:
        return _error("No trade ads right now.")
    lines = [
        f"**Offering:** {ad.offering or 'N/A'}\n**Wanting:** {ad.wanting or 'N/A'}"
        for ad in trade_ads
    ]
    return Reply(embed=make_embed("📢 Tap Sim — Latest Trade Ads", lines))


COMMANDS: Dict[str, Handler] = {
    "help": cmd_help,
    "hatches": cmd_hatches,
    "value": cmd_value,
    "search": cmd_search,
    "topvalues": cmd_topvalues,
    "enchants": cmd_enchants,
    "snipes": cmd_snipes,
    "ads": cmd_ads,
}


async def build_reply(api: TapSimAPI, settings: Settings, command: str, query: str) -> Optional[Reply]:
    handler = COMMANDS.get(command)
    if handler is None:
        return None
    try:
        return await handler(api, settings, query)
    except UpstreamError as e:
        log.warning("!%s failed upstream: %s", command, e)
        return _error("Tap Sim API error, try again in a minute.")

# -----------------------------------------------------------------------------
# Discord client & events
# -----------------------------------------------------------------------------

def create_client(settings: Settings, api: TapSimAPI) -> discord.Client:
    intents = discord.Intents.default()
    intents.guilds = True
    intents.messages = True
    intents.message_content = True  # prefix commands need the text
    client = discord.Client(intents=intents)

    async def post_board(entries: List[Entry]) -> None:
        channel = client.get_channel(settings.hatches_channel_id)
        if channel is None:
            channel = await client.fetch_channel(settings.hatches_channel_id)
        await channel.send(embed=hatches_board_embed(entries, settings))

    poster = HatchesPoster(api.eggs, post_board, ChangeDetector("cost"))

    @tasks.loop(minutes=settings.post_interval_minutes)
    async def hatches_loop():
        await poster.run_cycle()

    @hatches_loop.before_loop
    async def _wait_ready():
        await client.wait_until_ready()

    @client.event
    async def on_ready():
        print(f"Logged in as {client.user}")
        if settings.hatches_channel_id and not hatches_loop.is_running():
            # first iteration runs right away, then every interval
            hatches_loop.start()
            print(f"[startup] auto-posting hatches every {settings.post_interval_minutes} min "
                  f"to channel {settings.hatches_channel_id}")

    @client.event
    async def on_message(msg: discord.Message):
        if msg.author.bot:
            return
        parsed = parse_command(msg.content, settings.command_prefix)
        if parsed is None:
            return
        command, query = parsed

        reply = await build_reply(api, settings, command, query)
        if reply is None:
            return
        if reply.as_reply:
            await msg.reply(reply.content, embed=reply.embed)
        else:
            await msg.channel.send(reply.content, embed=reply.embed)

    return client

# -----------------------------------------------------------------------------
# Entrypoint
# -----------------------------------------------------------------------------

async def _run(settings: Settings) -> None:
    api = TapSimAPI(settings.api_base, timeout=settings.http_timeout, backoff=settings.http_retry_backoff)
    client = create_client(settings, api)
    try:
        async with client:
            await client.start(settings.token)
    finally:
        await api.close()


def main() -> None:
    try:
        settings = Settings.from_env()
    except ConfigError as e:
        print(f"[fatal] {e}")
        sys.exit(1)

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)-8s %(name)s %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    print(f"[startup] API_BASE={settings.api_base}")
    print(f"[startup] HATCHES_CHANNEL_ID={settings.hatches_channel_id or '<unset, auto-post off>'} "
          f"POST_INTERVAL_MINUTES={settings.post_interval_minutes}")

    try:
        asyncio.run(_run(settings))
    except KeyboardInterrupt:
        print("Shutting down…")


if __name__ == "__main__":
    main()
