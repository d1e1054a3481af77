from __future__ import annotations

import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models import Card, Country, League, LeagueCard, LeagueTeamCard, Player
from app.schemas.roster import LeagueCardOut
from app.services.errors import NotFoundError

logger = logging.getLogger(__name__)

SOURCE_OWNED = "OWNED"
SOURCE_GRANT = "GRANT"


def sync_league_cards(db: Session, league_id: int, user_id: int) -> int:
    """Mint a league card for every owned card not yet minted in the league.

    Adds rows to the session without committing; returns how many were added.
    """
    minted = select(LeagueCard.backing_card_id).where(
        LeagueCard.league_id == league_id,
        LeagueCard.backing_card_id.is_not(None),
    )
    cards = (
        db.execute(
            select(Card)
            .where(Card.user_id == user_id, Card.id.not_in(minted))
            .order_by(Card.id)
        )
        .scalars()
        .all()
    )
    for card in cards:
        db.add(
            LeagueCard(
                league_id=league_id,
                user_id=user_id,
                player_id=card.player_id,
                source_kind=SOURCE_OWNED,
                backing_card_id=card.id,
            )
        )
    if cards:
        logger.info(
            "inventory:mint league_id=%s user_id=%s count=%s", league_id, user_id, len(cards)
        )
    return len(cards)


def grant_league_card(db: Session, league: League, user_id: int, player_id: int) -> LeagueCard:
    if not db.get(Player, player_id):
        raise NotFoundError("player_not_found")
    league_card = LeagueCard(
        league_id=league.id,
        user_id=user_id,
        player_id=player_id,
        source_kind=SOURCE_GRANT,
        backing_card_id=None,
    )
    db.add(league_card)
    db.commit()
    db.refresh(league_card)
    logger.info(
        "inventory:grant league_id=%s user_id=%s player_id=%s", league.id, user_id, player_id
    )
    return league_card


def owned_league_card_ids(db: Session, league_id: int, user_id: int) -> List[int]:
    return (
        db.execute(
            select(LeagueCard.id).where(
                LeagueCard.league_id == league_id,
                LeagueCard.user_id == user_id,
            )
        )
        .scalars()
        .all()
    )


def list_eligible_cards(
    db: Session,
    league_id: int,
    user_id: int,
    submission_id: Optional[int] = None,
) -> List[LeagueCardOut]:
    rows = db.execute(
        select(LeagueCard, Player, Country, Card)
        .join(Player, Player.id == LeagueCard.player_id)
        .outerjoin(Country, Country.id == Player.country_id)
        .outerjoin(Card, Card.id == LeagueCard.backing_card_id)
        .where(LeagueCard.league_id == league_id, LeagueCard.user_id == user_id)
        .order_by(Player.name_display, LeagueCard.id)
    ).all()

    selected_at = {}
    if submission_id is not None:
        selected_at = dict(
            db.execute(
                select(LeagueTeamCard.league_card_id, LeagueTeamCard.selected_at).where(
                    LeagueTeamCard.submission_id == submission_id
                )
            ).all()
        )

    return [
        LeagueCardOut(
            league_card_id=league_card.id,
            league_id=league_card.league_id,
            user_id=league_card.user_id,
            player_id=league_card.player_id,
            source_kind=league_card.source_kind,
            backing_card_id=league_card.backing_card_id,
            league_card_created_at=league_card.created_at,
            player_full_name=player.full_name,
            player_name_display=player.name_display,
            role=player.role,
            tier=player.tier,
            country_id=player.country_id,
            player_image=player.image,
            country_short_name=country.short_name if country else None,
            country_name=country.name if country else None,
            country_logo=country.logo if country else None,
            card_type=card.card_type if card else None,
            edition=card.edition if card else None,
            minted_on=card.minted_on if card else None,
            is_selected=league_card.id in selected_at,
            selected_at=selected_at.get(league_card.id),
        )
        for league_card, player, country, card in rows
    ]
