"""
Moteur de filtrage par tags (logique pure, sans accès BDD).

- match_entities : applique une requête ET/OU sur une table entité → tags
- summarize_tag_usage : agrège les statistiques d'utilisation des tags

Les requêtes SQL qui alimentent ces fonctions sont dans tag_search et tag_service.
"""

from enum import Enum
from typing import Collection, Hashable, Iterable, List, Mapping, Sequence, Tuple, TypeVar

from academy.errors import InvalidInput
from academy.schemas.tag import KindCounts, TagStatsBreakdown, TagStatsResponse, TagUsageResponse, UntaggedCounts

K = TypeVar("K", bound=Hashable)
T = TypeVar("T", bound=Hashable)

UNCATEGORIZED = "미분류"


class TagLogic(str, Enum):
    AND = "AND"
    OR = "OR"


class TargetKind(str, Enum):
    STUDENTS = "students"
    CLASSES = "classes"
    SESSIONS = "sessions"
    MATERIALS = "materials"


def parse_query(tag_ids: Iterable[T], logic: str, target: str) -> Tuple[frozenset, TagLogic, TargetKind]:
    """Valide une requête de recherche ; lève InvalidInput au premier défaut."""
    wanted = frozenset(tag_ids or ())
    if not wanted:
        raise InvalidInput("Au moins un tag doit être fourni.")
    try:
        parsed_logic = TagLogic(logic)
    except ValueError:
        raise InvalidInput("La logique doit être AND ou OR.") from None
    try:
        parsed_target = TargetKind(target)
    except ValueError:
        raise InvalidInput(
            f"Cible invalide. Valeurs acceptées : {[k.value for k in TargetKind]}"
        ) from None
    return wanted, parsed_logic, parsed_target


def matches(entity_tags: Collection[T], wanted: frozenset, logic: TagLogic) -> bool:
    common = wanted.intersection(entity_tags)
    if logic is TagLogic.AND:
        return len(common) == len(wanted)
    return bool(common)


def match_entities(tag_map: Mapping[K, Collection[T]], wanted: frozenset, logic: TagLogic) -> List[K]:
    """Retourne les entités qui satisfont la requête, dans l'ordre de la table."""
    return [entity_id for entity_id, tags in tag_map.items() if matches(tags, wanted, logic)]


def summarize_tag_usage(
    tags: Sequence[TagUsageResponse],
    totals: KindCounts,
    tagged: KindCounts,
    top_n: int = 5,
) -> TagStatsResponse:
    """
    Agrège les statistiques globales.

    - tags   : utilisation par tag, dans l'ordre de création
    - totals : nombre total d'entités par type
    - tagged : nombre d'entités par type portant au moins un tag
    """
    total_tagged_items = sum(t.usage_count for t in tags)
    total_items = totals.grand_total()

    untagged = UntaggedCounts(
        students=totals.students - tagged.students,
        classes=totals.classes - tagged.classes,
        sessions=totals.sessions - tagged.sessions,
        materials=totals.materials - tagged.materials,
        total=total_items - tagged.grand_total(),
    )

    avg = total_tagged_items / total_items if total_items > 0 else 0

    # sorted() est stable : à égalité, l'ordre de création est conservé
    top_tags = sorted(tags, key=lambda t: t.usage_count, reverse=True)[:top_n]

    category_stats: dict[str, int] = {}
    for tag in tags:
        category = tag.category or UNCATEGORIZED
        category_stats[category] = category_stats.get(category, 0) + 1

    return TagStatsResponse(
        total_tags=len(tags),
        total_tagged_items=total_tagged_items,
        untagged_count=untagged,
        avg_tags_per_item=round(avg, 2),
        top_tags=top_tags,
        category_stats=category_stats,
        breakdown=TagStatsBreakdown(totals=totals, tagged=tagged),
    )
