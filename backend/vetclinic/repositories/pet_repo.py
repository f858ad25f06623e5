from typing import Optional

from vetclinic.domain.entities import Pet
from vetclinic.domain.interfaces import IDocumentStore, IPetRepository

PETS = "pets"


class PetRepository(IPetRepository):
    def __init__(self, store: IDocumentStore) -> None:
        self.store = store

    def get_by_id(self, pet_id: str) -> Optional[Pet]:
        record = self.store.get(PETS, pet_id)
        if not record:
            return None
        return Pet(
            id=record["id"],
            owner_id=record.get("owner_id", ""),
            name=record.get("name", ""),
            species=record.get("species", ""),
        )
