import logging

import nextcord
from nextcord.ext import commands

from utils.config import load_settings
from utils.dice import evaluate
from utils.dispatch import ChatEvent, SkillCheckDispatcher, event_kind
from utils.players import PlayerRegistry
from utils.sheets import SheetStore
from utils.skills import Tier

log = logging.getLogger(__name__)

TIER_LABEL = {
    Tier.UNTRAINED: "Untrained",
    Tier.TRAINED: "Skill Training",
    Tier.IMPROVED: "Improved Skill Training",
    Tier.GREATER: "Greater Skill Training",
}

TIER_COLOR = {
    Tier.UNTRAINED: nextcord.Color.light_grey(),
    Tier.TRAINED: nextcord.Color.green(),
    Tier.IMPROVED: nextcord.Color.blue(),
    Tier.GREATER: nextcord.Color.purple(),
}


def build_embed(payload, roll=None) -> nextcord.Embed:
    """
    Render a skill check. `roll` is the evaluated RollResult, or None to
    show only the unevaluated expression.
    """
    embed = nextcord.Embed(
        title=f"🎲 {payload.skill_name.title()}"[:256],
        color=TIER_COLOR[payload.tier],
    )
    embed.set_author(name=payload.char_name)
    if roll is not None:
        embed.add_field(name="Result", value=f"**{roll.total}**", inline=True)
    embed.add_field(name="Training", value=TIER_LABEL[payload.tier], inline=True)
    if roll is not None and roll.details:
        embed.add_field(name="Dice", value="\n".join(roll.details)[:1024], inline=False)
    embed.add_field(name="Roll", value=f"`{payload.result.strip()}`"[:1024], inline=False)
    if payload.notes:
        embed.add_field(name="Notes", value=payload.notes[:1024], inline=False)
    return embed


class SkillCheck(commands.Cog):
    """
    RiM skill checks. Speak as a character (`!char <name>`) then:

      !r <skill> [+/- Advantages/Drawbacks] ["notes"]
      !r Mathematics +1 "+2 if used as part of a spell"
      !r spell            # shortened names are fine
    """

    def __init__(self, bot, dispatcher: SkillCheckDispatcher | None = None):
        self.bot = bot
        if dispatcher is None:
            settings = load_settings()
            store = SheetStore(settings.sheets_dir)
            registry = PlayerRegistry(settings.players_registry, store)
            dispatcher = SkillCheckDispatcher(settings.skillcheck_prefix, store, registry)
        self.dispatcher = dispatcher

    @commands.Cog.listener()
    async def on_message(self, message):
        if message.author.bot:
            return

        event = ChatEvent(
            kind=event_kind(message.content),
            content=message.content,
            player_id=str(message.author.id),
            who=message.author.display_name,
        )
        out = self.dispatcher.handle(event)
        if out is None:
            return

        if out.private:
            try:
                await message.author.send(out.text)
            except nextcord.Forbidden:
                log.warning("couldn't DM %s the roll error: %s", event.who, out.text)
            return

        try:
            roll = evaluate(out.payload.result)
        except ValueError as e:
            log.warning("couldn't evaluate %r: %s", out.payload.result, e)
            roll = None
        await message.channel.send(embed=build_embed(out.payload, roll))


def setup(bot):
    bot.add_cog(SkillCheck(bot))
