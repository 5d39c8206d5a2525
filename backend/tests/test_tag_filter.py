"""
Tests unitaires pour le moteur de filtrage par tags et les statistiques.
"""

import uuid

import pytest

from academy.errors import InvalidInput
from academy.schemas.tag import KindCounts, TagUsageResponse
from academy.services.tag_filter import (
    UNCATEGORIZED,
    TagLogic,
    TargetKind,
    match_entities,
    parse_query,
    summarize_tag_usage,
)

MATH = uuid.uuid4()
INTRO = uuid.uuid4()
ART = uuid.uuid4()


# --- Helpers ---

def make_usage(name, usage_count, category=None):
    return TagUsageResponse(
        id=uuid.uuid4(),
        name=name,
        color="#3B82F6",
        category=category,
        usage_count=usage_count,
        breakdown=KindCounts(students=usage_count),
    )


# --- parse_query ---

def test_requete_valide():
    wanted, logic, target = parse_query([MATH, INTRO, MATH], "OR", "sessions")
    assert wanted == frozenset({MATH, INTRO})
    assert logic is TagLogic.OR
    assert target is TargetKind.SESSIONS


def test_liste_de_tags_vide():
    with pytest.raises(InvalidInput):
        parse_query([], "AND", "students")


def test_logique_invalide():
    with pytest.raises(InvalidInput):
        parse_query([MATH], "XOR", "students")


def test_cible_invalide():
    with pytest.raises(InvalidInput):
        parse_query([MATH], "AND", "teachers")


# --- match_entities ---

def test_scenario_trois_eleves_un_seul_avec_les_deux_tags():
    s1, s2, s3 = uuid.uuid4(), uuid.uuid4(), uuid.uuid4()
    tag_map = {s1: {MATH}, s2: {MATH, INTRO}, s3: {INTRO, ART}}
    assert match_entities(tag_map, frozenset({MATH, INTRO}), TagLogic.AND) == [s2]


def test_ou_retient_au_moins_un_tag():
    s1, s2, s3 = uuid.uuid4(), uuid.uuid4(), uuid.uuid4()
    tag_map = {s1: {MATH}, s2: {ART}, s3: {INTRO}}
    assert match_entities(tag_map, frozenset({MATH, INTRO}), TagLogic.OR) == [s1, s3]


def test_et_est_inclus_dans_ou():
    tag_map = {
        uuid.uuid4(): tags
        for tags in ({MATH}, {MATH, INTRO}, {INTRO, ART}, {MATH, INTRO, ART}, set(), {ART})
    }
    for wanted in ({MATH}, {MATH, INTRO}, {INTRO, ART}, {MATH, INTRO, ART}):
        and_result = set(match_entities(tag_map, frozenset(wanted), TagLogic.AND))
        or_result = set(match_entities(tag_map, frozenset(wanted), TagLogic.OR))
        assert and_result <= or_result


def test_ordre_de_la_table_conserve():
    ids = [uuid.uuid4() for _ in range(5)]
    tag_map = {i: {MATH} for i in ids}
    assert match_entities(tag_map, frozenset({MATH}), TagLogic.AND) == ids


# --- summarize_tag_usage ---

def test_statistiques_globales():
    tags = [
        make_usage("Maths", 3, "Matière"),
        make_usage("Débutant", 5, "Niveau"),
        make_usage("Bourse", 1),
    ]
    totals = KindCounts(students=10, classes=4, sessions=6, materials=0)
    tagged = KindCounts(students=4, classes=2, sessions=1, materials=0)

    stats = summarize_tag_usage(tags, totals, tagged, top_n=2)

    assert stats.total_tags == 3
    assert stats.total_tagged_items == 9
    assert stats.untagged_count.students == 6
    assert stats.untagged_count.total == 13
    assert stats.avg_tags_per_item == 0.45
    assert [t.name for t in stats.top_tags] == ["Débutant", "Maths"]
    assert stats.category_stats == {"Matière": 1, "Niveau": 1, UNCATEGORIZED: 1}
    assert stats.breakdown.totals == totals


def test_invariant_non_tagues_plus_tagues_egal_total():
    totals = KindCounts(students=7, classes=3, sessions=12, materials=5)
    tagged = KindCounts(students=2, classes=3, sessions=0, materials=4)
    stats = summarize_tag_usage([make_usage("A", 9)], totals, tagged)
    assert stats.untagged_count.total + tagged.grand_total() == totals.grand_total()


def test_moyenne_nulle_sans_entite():
    stats = summarize_tag_usage([make_usage("A", 0)], KindCounts(), KindCounts())
    assert stats.avg_tags_per_item == 0
    assert stats.untagged_count.total == 0


def test_top_stable_a_egalite():
    tags = [make_usage("Premier", 2), make_usage("Second", 2), make_usage("Troisième", 2)]
    stats = summarize_tag_usage(tags, KindCounts(students=3), KindCounts(students=3), top_n=2)
    assert [t.name for t in stats.top_tags] == ["Premier", "Second"]
