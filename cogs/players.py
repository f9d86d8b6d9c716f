from nextcord.ext import commands

from utils.config import load_settings
from utils.players import PlayerRegistry
from utils.sheets import SheetStore

MAX_SUGGESTIONS = 8


def _names(characters) -> str:
    return ", ".join(f"`{c.name}`" for c in characters[:MAX_SUGGESTIONS])


class Players(commands.Cog):
    """Who you are speaking as. Skill checks roll for your active character."""

    def __init__(self, bot, registry: PlayerRegistry | None = None):
        self.bot = bot
        if registry is None:
            settings = load_settings()
            registry = PlayerRegistry(settings.players_registry, SheetStore(settings.sheets_dir))
        self.registry = registry

    @property
    def store(self) -> SheetStore:
        return self.registry.store

    @commands.command(name="char")
    async def char(self, ctx, *, char_name: str = None):
        """
        Choose who you are speaking as for skill checks.
          !char              -> list your characters
          !char Twilight     -> speak as 'Twilight Sparkle' (part of the name is enough)
        """
        user_id = ctx.author.id

        if not char_name:
            names = self.registry.list_chars(user_id)
            if not names:
                await ctx.send("❌ You don’t have any characters yet. Claim a sheet with `!claim <name>`.")
                return
            current = self.registry.get_active(user_id)
            lines = [f"• {n}{' ✅ (speaking as)' if n == current else ''}" for n in names]
            await ctx.send("**Your characters:**\n" + "\n".join(lines) + "\n\nUse `!char <name>` to switch.")
            return

        mine = [c for c in self.store.find_characters(char_name) if c.owner_id == str(user_id)]
        if not mine:
            await ctx.send(f"❌ You don’t own a character matching **{char_name}**.")
            return
        if len(mine) > 1:
            await ctx.send(f"⚠️ **{char_name}** could be {_names(mine)}. Be more specific.")
            return

        target = mine[0]
        self.registry.add_char(user_id, target.name)
        if not self.registry.set_active(user_id, target.name):
            await ctx.send("❌ Couldn’t switch character (ownership or registry mismatch).")
            return
        await ctx.send(f"✅ Now speaking as **{target.name}**.")

    @commands.command(name="claim")
    async def claim(self, ctx, *, char_name: str = None):
        """
        Claim a character sheet nobody owns yet.
          !claim Twilight Sparkle
        """
        if not char_name:
            await ctx.send("Usage: `!claim <character name>`")
            return

        found = self.store.find_characters(char_name)
        if not found:
            await ctx.send(f"❌ No sheet matches **{char_name}**.")
            return
        if len(found) > 1:
            await ctx.send(f"⚠️ **{char_name}** could be {_names(found)}. Be more specific.")
            return

        target = found[0]
        if target.owner_id == str(ctx.author.id):
            self.registry.add_char(ctx.author.id, target.name)
            await ctx.send(f"✅ **{target.name}** is already yours.")
            return
        if not self.registry.claim_char(ctx.author.id, target.name):
            await ctx.send(f"❌ **{target.name}** already has an owner.")
            return
        await ctx.send(f"✅ Claimed **{target.name}**. Use `!char {target.name}` to speak as them.")


def setup(bot):
    bot.add_cog(Players(bot))
