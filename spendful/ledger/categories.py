"""Custom categories: user-defined labels added to the built-in list."""

from typing import Optional

from spendful.ledger.base import LedgerStoreBase
from spendful.ledger.keys import StorageKeys
from spendful.models.audit import LedgerEventBuilder, LedgerEventType
from spendful.models.ledger import DEFAULT_CATEGORIES, CustomCategory


class CategoryStore(LedgerStoreBase):

    async def list_custom(self) -> list[CustomCategory]:
        return await self._load_records(StorageKeys.CUSTOM_CATEGORIES, CustomCategory)

    async def all_categories(self) -> list[str]:
        """Built-in categories followed by custom names, in creation order."""
        custom = await self.list_custom()
        return list(DEFAULT_CATEGORIES) + [c.name for c in custom]

    async def add(self, name: str) -> CustomCategory:
        async with self._queue.mutation():
            categories = await self.list_custom()
            category = CustomCategory(name=name, created_at=self._clock.now())
            categories.append(category)
            await self._save_records(StorageKeys.CUSTOM_CATEGORIES, categories)

        await self._audit.log(LedgerEventBuilder.category_changed(
            LedgerEventType.CATEGORY_ADDED, category.id, category.name
        ))
        return category

    async def rename(self, category_id: str, new_name: str) -> bool:
        renamed: Optional[CustomCategory] = None
        async with self._queue.mutation():
            categories = await self.list_custom()
            for index, category in enumerate(categories):
                if category.id == category_id:
                    renamed = CustomCategory.model_validate(
                        {**category.model_dump(), "name": new_name}
                    )
                    categories[index] = renamed
                    break
            if renamed is None:
                return False
            await self._save_records(StorageKeys.CUSTOM_CATEGORIES, categories)

        await self._audit.log(LedgerEventBuilder.category_changed(
            LedgerEventType.CATEGORY_RENAMED, category_id, renamed.name
        ))
        return True

    async def delete(self, category_id: str) -> bool:
        """Remove a custom category. Entries keep their category text."""
        async with self._queue.mutation():
            categories = await self.list_custom()
            remaining = [c for c in categories if c.id != category_id]
            if len(remaining) == len(categories):
                return False
            await self._save_records(StorageKeys.CUSTOM_CATEGORIES, remaining)

        await self._audit.log(LedgerEventBuilder.category_changed(
            LedgerEventType.CATEGORY_DELETED, category_id
        ))
        return True
