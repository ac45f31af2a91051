# venturepool/services/visibility.py : masquage des noms selon le lecteur

from typing import Iterable, Optional

from sqlalchemy.orm import Session

from venturepool.config import MASK_MIN_STARS, ROLE_ADMIN
from venturepool.models import models


def mask_name(username: Optional[str], viewer_id: Optional[int], subject_id: Optional[int],
              viewer_can_see: bool) -> Optional[str]:
    """
    Nom affiché pour `subject_id` vu par `viewer_id`.

    Le nom réel est rendu si le lecteur a le droit de le voir, s'il se regarde
    lui-même, ou si le nom est vide. Sinon seule la première lettre reste, en
    majuscule, suivie d'au moins MASK_MIN_STARS astérisques: "Bo" -> "B***".
    """
    if viewer_can_see or not username or (viewer_id is not None and viewer_id == subject_id):
        return username
    return username[0].upper() + "*" * max(len(username) - 1, MASK_MIN_STARS)


def mask_subject(description: Optional[str], username: str, shown: str) -> Optional[str]:
    """Remplace le nom en tête de description, et seulement celui-là"""
    if not description or shown == username or not description.startswith(username):
        return description
    rest = description[len(username):]
    if rest[:1].isalnum() or rest[:1] == "_":
        # "an" ne doit pas masquer le début de "anne a investi..."
        return description
    return shown + rest


class ViewerContext:
    """Ce que le lecteur courant a le droit de voir, calculé une fois par requête"""

    def __init__(self, viewer_id: int, is_admin: bool = False,
                 managed_business_ids: Iterable[int] = (),
                 managed_investor_ids: Iterable[int] = ()):
        self.viewer_id = viewer_id
        self.is_admin = is_admin
        self.managed_business_ids = frozenset(managed_business_ids)
        self.managed_investor_ids = frozenset(managed_investor_ids)

    @classmethod
    def for_user(cls, db: Session, user: models.User) -> "ViewerContext":
        managed = [
            row[0] for row in db.query(models.BusinessManager.business_id).filter(
                models.BusinessManager.user_id == user.id
            ).all()
        ]
        investors = []
        if managed:
            investors = [
                row[0] for row in db.query(models.Investment.user_id).filter(
                    models.Investment.business_id.in_(managed)
                ).distinct().all()
            ]
        return cls(user.id, user.role == ROLE_ADMIN, managed, investors)

    def manages(self, business_id: Optional[int]) -> bool:
        return business_id is not None and business_id in self.managed_business_ids

    # --- règles "peut voir" ---

    def can_see_user(self, subject_id: Optional[int]) -> bool:
        """Listes d'utilisateurs: admin, soi-même, ou investisseur d'un business géré"""
        return self.is_admin or subject_id == self.viewer_id or subject_id in self.managed_investor_ids

    def can_see_in_business(self, subject_id: Optional[int], business_id: Optional[int]) -> bool:
        """Lignes rattachées à un business (investissements, retraits, parts, journal)"""
        return self.is_admin or subject_id == self.viewer_id or self.manages(business_id)

    def can_see_recorder(self, recorder_id: Optional[int], business_id: Optional[int]) -> bool:
        """Auteur d'un gain/dépense: admin, l'auteur lui-même, ou gérant du business"""
        return self.is_admin or recorder_id == self.viewer_id or self.manages(business_id)

    def can_see_leaderboard(self, subject_id: Optional[int]) -> bool:
        # Classement inter-business: aucun droit de gérant ne s'applique
        return self.is_admin or subject_id == self.viewer_id

    # --- noms affichés ---

    def user_name(self, username, subject_id):
        return mask_name(username, self.viewer_id, subject_id, self.can_see_user(subject_id))

    def row_name(self, username, subject_id, business_id):
        return mask_name(username, self.viewer_id, subject_id,
                         self.can_see_in_business(subject_id, business_id))

    def recorder_name(self, username, recorder_id, business_id):
        return mask_name(username, self.viewer_id, recorder_id,
                         self.can_see_recorder(recorder_id, business_id))

    def leaderboard_name(self, username, subject_id):
        return mask_name(username, self.viewer_id, subject_id, self.can_see_leaderboard(subject_id))
