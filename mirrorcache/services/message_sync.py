"""
mirrorcache.services.message_sync — Messages & Their Owned Rows
================================================================

A message owns embeds (which own embed fields), attachments, reactions and
message stickers.  The owned rows are written before the message row on
create, and deleted before it on delete, embed fields before their embed.

On MESSAGE_UPDATE any owned collection that is present in the frame is
replaced as a whole; collections that were not sent are left alone.

Embeds have no id on the wire.  Each one is keyed by
:func:`~mirrorcache.engine.models.embed_id` (message id + index), so
re-applying the same event rewrites the same rows.
"""

from __future__ import annotations

import logging

from mirrorcache.engine.backend import Backend
from mirrorcache.engine.events import EventType, Handler
from mirrorcache.engine.models import (
    CachedAttachment,
    CachedEmbed,
    CachedEmbedField,
    CachedMessage,
    CachedMessageSticker,
    CachedReaction,
    emoji_key,
)
from mirrorcache.engine.payloads import (
    AttachmentPayload,
    EmbedPayload,
    MessageDeleteBulkPayload,
    MessageDeletePayload,
    MessagePayload,
    ReactionEventPayload,
    ReactionRemoveAllPayload,
    ReactionRemoveEmojiPayload,
    StickerItemPayload,
)
from mirrorcache.services.user_sync import require_current_user

logger = logging.getLogger(__name__)


class MessageSync:
    def __init__(self, backend: Backend) -> None:
        self.backend = backend

    def handlers(self) -> dict[EventType, Handler]:
        return {
            EventType.MESSAGE_CREATE: self.on_message_create,
            EventType.MESSAGE_UPDATE: self.on_message_update,
            EventType.MESSAGE_DELETE: self.on_message_delete,
            EventType.MESSAGE_DELETE_BULK: self.on_message_delete_bulk,
            EventType.MESSAGE_REACTION_ADD: self.on_reaction_add,
            EventType.MESSAGE_REACTION_REMOVE: self.on_reaction_remove,
            EventType.MESSAGE_REACTION_REMOVE_ALL: self.on_reaction_remove_all,
            EventType.MESSAGE_REACTION_REMOVE_EMOJI: self.on_reaction_remove_emoji,
        }

    # -----------------------------------------------------------------------
    # Owned collections
    # -----------------------------------------------------------------------
    async def _add_attachments(self, message_id: int, attachments: list[AttachmentPayload]) -> None:
        for attachment in attachments:
            await self.backend.upsert_attachment(CachedAttachment.from_payload(attachment, message_id))

    async def _add_stickers(self, message_id: int, items: list[StickerItemPayload]) -> None:
        for item in items:
            await self.backend.upsert_message_sticker(CachedMessageSticker.from_payload(item, message_id))

    async def _add_embeds(self, message_id: int, embeds: list[EmbedPayload]) -> None:
        for position, embed in enumerate(embeds):
            cached = CachedEmbed.from_payload(embed, message_id, position)
            for index, field in enumerate(embed.fields):
                await self.backend.upsert_embed_field(
                    CachedEmbedField.from_payload(field, cached.id, index)
                )
            await self.backend.upsert_embed(cached)

    async def _remove_embeds(self, message_id: int) -> None:
        for embed in await self.backend.list_message_embeds(message_id):
            await self.backend.delete_embed_fields(embed.id)
            await self.backend.delete_embed(embed.id)

    async def remove_message(self, message_id: int) -> None:
        """Delete a message and everything it owns."""
        await self._remove_embeds(message_id)
        await self.backend.delete_message_attachments(message_id)
        await self.backend.delete_message_reactions(message_id)
        await self.backend.delete_message_stickers(message_id)
        await self.backend.delete_message(message_id)

    # -----------------------------------------------------------------------
    # Message lifecycle
    # -----------------------------------------------------------------------
    async def on_message_create(self, message: MessagePayload) -> None:
        await self._add_attachments(message.id, message.attachments)

        # A message only tells whether *we* reacted, not who else did.
        own_reactions = [reaction for reaction in message.reactions if reaction.me]
        if own_reactions:
            current_user = await require_current_user(self.backend)
            for reaction in own_reactions:
                await self.backend.upsert_reaction(CachedReaction(
                    message_id=message.id,
                    user_id=current_user.id,
                    emoji=emoji_key(reaction.emoji),
                    channel_id=message.channel_id,
                    guild_id=message.guild_id,
                ))

        await self._add_stickers(message.id, message.sticker_items)
        await self._add_embeds(message.id, message.embeds)
        await self.backend.upsert_message(CachedMessage.from_payload(message))

    async def on_message_update(self, message: MessagePayload) -> None:
        cached = await self.backend.get_message(message.id)
        if cached is None:
            logger.debug("Skipping update of uncached message %d", message.id)
            return

        if message.present("attachments"):
            await self.backend.delete_message_attachments(message.id)
            await self._add_attachments(message.id, message.attachments)
        if message.present("sticker_items"):
            await self.backend.delete_message_stickers(message.id)
            await self._add_stickers(message.id, message.sticker_items)
        if message.present("embeds"):
            await self._remove_embeds(message.id)
            await self._add_embeds(message.id, message.embeds)
        await self.backend.upsert_message(cached.update(message))

    async def on_message_delete(self, event: MessageDeletePayload) -> None:
        await self.remove_message(event.id)

    async def on_message_delete_bulk(self, event: MessageDeleteBulkPayload) -> None:
        for message_id in event.ids:
            await self.remove_message(message_id)

    # -----------------------------------------------------------------------
    # Reactions
    # -----------------------------------------------------------------------
    async def on_reaction_add(self, event: ReactionEventPayload) -> None:
        await self.backend.upsert_reaction(CachedReaction(
            message_id=event.message_id,
            user_id=event.user_id,
            emoji=emoji_key(event.emoji),
            channel_id=event.channel_id,
            guild_id=event.guild_id,
        ))

    async def on_reaction_remove(self, event: ReactionEventPayload) -> None:
        await self.backend.delete_reaction(event.message_id, event.user_id, emoji_key(event.emoji))

    async def on_reaction_remove_all(self, event: ReactionRemoveAllPayload) -> None:
        await self.backend.delete_message_reactions(event.message_id)

    async def on_reaction_remove_emoji(self, event: ReactionRemoveEmojiPayload) -> None:
        await self.backend.delete_emoji_reactions(event.message_id, emoji_key(event.emoji))
