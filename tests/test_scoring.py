import pathlib
import sys

# Ensure src package is on path
sys.path.append(str(pathlib.Path(__file__).resolve().parents[1] / "src"))

from seating_optimizer import (
    Constraint,
    Guest,
    OptimizationWeights,
    RelationshipEdge,
    Table,
    calculate_score,
    compatibility,
    placement_score,
    score_breakdown,
)
from seating_optimizer.scoring import compute_table_stats, grade_tables
from seating_optimizer.weights import EngineOptions


def guest(gid, *edges, **kwargs):
    return Guest(
        id=gid,
        name=gid.upper(),
        relationships=[RelationshipEdge(target, rtype) for target, rtype in edges],
        **kwargs,
    )


class TestCompatibility:
    def test_weights_by_type(self):
        other = guest("b")
        for rtype, expected in [("partner", 10), ("family", 5), ("friend", 3), ("colleague", 1), ("avoid", -20)]:
            assert compatibility(guest("a", ("b", rtype)), other) == expected

    def test_no_edge_scores_zero(self):
        assert compatibility(guest("a"), guest("b")) == 0

    def test_directional(self):
        a = guest("a", ("b", "friend"))
        b = guest("b")
        assert compatibility(a, b) == 3
        assert compatibility(b, a) == 0

    def test_unknown_type_scores_zero(self):
        assert compatibility(guest("a", ("b", "acquaintance")), guest("b")) == 0


class TestPlacementScore:
    def test_sums_members_against_occupants(self):
        a = guest("a", ("c", "friend"), ("d", "avoid"))
        b = guest("b", ("c", "family"))
        c, d = guest("c", ("a", "partner")), guest("d")
        # only the members' own edges count
        assert placement_score([a, b], [c, d]) == 3 - 20 + 5

    def test_empty_table_scores_zero(self):
        assert placement_score([guest("a", ("b", "friend"))], []) == 0

    def test_heuristics_are_off_by_default(self):
        a = guest("a", group="X", interests=["golf"])
        b = guest("b", group="X", interests=["Golf"])
        assert placement_score([a], [b]) == 0
        options = EngineOptions(group_cohesion=True, interest_match=True)
        assert placement_score([a], [b], options=options) == 2 + 2

    def test_industry_mix_when_interest_match_on(self):
        options = EngineOptions(interest_match=True)
        me = guest("me", industry="tech")
        mixed = [guest("o1", industry="tech"), guest("o2", industry="law"), guest("o3", industry="law")]
        assert placement_score([me], mixed, options=options) == 1
        assert placement_score([me], mixed) == 0
        # a table that is already half or more the same industry earns nothing
        assert placement_score([me], [guest("o1", industry="tech")], options=options) == 0
        assert placement_score([guest("x")], mixed, options=options) == 0

    def test_soft_constraints_when_enforced(self):
        a, b = guest("a"), guest("b")
        together = Constraint(id="c1", type="same_table", guest_ids=["a", "b"], priority="preferred")
        apart = Constraint(id="c2", type="different_table", guest_ids=["a", "b"], priority="optional")
        options = EngineOptions(enforce_constraints=True)
        assert placement_score([a], [b], options=options, constraints=[together]) == 20
        assert placement_score([a], [b], options=options, constraints=[apart]) == -5
        assert placement_score([a], [b], constraints=[together]) == 0


class TestCalculateScore:
    def test_mutual_partners_together(self):
        guests = [guest("a", ("b", "partner"), table_id="t1"), guest("b", ("a", "partner"), table_id="t1")]
        assert calculate_score(guests) == 10

    def test_one_way_avoid_together(self):
        guests = [guest("a", ("b", "avoid"), table_id="t1"), guest("b", table_id="t1")]
        assert calculate_score(guests) == -10

    def test_apart_adjustments(self):
        partners = [guest("a", ("b", "partner"), table_id="t1"), guest("b", ("a", "partner"), table_id="t2")]
        assert calculate_score(partners) == -5
        avoiders = [guest("a", ("b", "avoid"), table_id="t1"), guest("b", ("a", "avoid"), table_id="t2")]
        assert calculate_score(avoiders) == 5
        friends = [guest("a", ("b", "friend"), table_id="t1"), guest("b", ("a", "friend"), table_id="t2")]
        assert calculate_score(friends) == 0

    def test_ignores_unseated_and_dangling_targets(self):
        guests = [
            guest("a", ("b", "partner"), ("ghost", "family"), table_id="t1"),
            guest("b", ("a", "partner")),
        ]
        assert calculate_score(guests) == 0

    def test_order_independent(self):
        guests = [
            guest("a", ("b", "family"), ("c", "avoid"), table_id="t1"),
            guest("b", ("a", "family"), table_id="t1"),
            guest("c", ("a", "friend"), table_id="t2"),
            guest("d", ("c", "colleague"), table_id="t2"),
        ]
        assert calculate_score(guests) == calculate_score(list(reversed(guests)))

    def test_custom_weights(self):
        weights = OptimizationWeights.from_mapping({"relationships": {"partner": 4}})
        guests = [guest("a", ("b", "partner"), table_id="t1"), guest("b", ("a", "partner"), table_id="t1")]
        assert calculate_score(guests, weights) == 4


class TestBreakdown:
    def test_perfect_when_nothing_to_check(self):
        b = score_breakdown([guest("a", table_id="t1")], [Table("t1", 2)])
        assert b.as_dict() == {"constraints": 100, "relationships": 100, "groups": 100, "capacity": 100}

    def test_capacity_shortfall(self):
        guests = [guest(g) for g in "abcd"]
        assert score_breakdown(guests, [Table("t1", 3)]).capacity == 75

    def test_capacity_ignores_declined(self):
        guests = [guest("a"), guest("b", rsvp="declined")]
        assert score_breakdown(guests, [Table("t1", 1)]).capacity == 100

    def test_groups_kept_together(self):
        guests = [
            guest("a", group="X", table_id="t1"),
            guest("b", group="X", table_id="t1"),
            guest("c", group="Y", table_id="t1"),
            guest("d", group="Y", table_id="t2"),
        ]
        assert score_breakdown(guests, []).groups == 50

    def test_unseated_group_is_not_together(self):
        guests = [guest("a", group="X"), guest("b", group="X")]
        assert score_breakdown(guests, []).groups == 0

    def test_only_required_violations_cost(self):
        guests = [guest(g, table_id="t1") for g in "abcd"]
        constraints = [
            Constraint(id="c1", type="different_table", guest_ids=["a", "b"]),
            Constraint(id="c2", type="must_not_sit_together", guest_ids=["c", "d"]),
            Constraint(id="c3", type="different_table", guest_ids=["a", "c"], priority="preferred"),
        ]
        assert score_breakdown(guests, [], constraints).constraints == 60

    def test_relationship_penalties_clamped(self):
        guests = [
            guest("a", ("b", "avoid"), ("c", "friend"), table_id="t1"),
            guest("b", table_id="t1"),
            guest("c", table_id="t2"),
        ]
        assert score_breakdown(guests, []).relationships == 100 - 15 - 5
        many = [guest("a", *[(f"x{i}", "avoid") for i in range(10)], table_id="t1")]
        many += [guest(f"x{i}", table_id="t1") for i in range(10)]
        assert score_breakdown(many, []).relationships == 0


class TestTableReport:
    def test_stats_and_grades(self):
        guests = [
            guest("a", ("b", "avoid"), table_id="t1"),
            guest("b", ("a", "friend"), table_id="t1"),
            guest("c", table_id="t2"),
            guest("d", table_id="t2"),
        ]
        tables = [Table("t1", 4, name="Head"), Table("t2", 1)]
        stats = compute_table_stats(guests, tables)
        head, small = stats
        assert head["name"] == "Head"
        assert head["total_score"] == -17
        assert head["compatibility"] == 80
        assert head["issues"] == ["A avoids B"]
        assert small["issues"] == ["Over capacity"]
        assert small["members"] == ["c", "d"]

        graded = grade_tables(stats)
        assert [g["grade"] for g in graded] == ["Good", "Excellent"]
        assert "grade" not in stats[0]

    def test_mixed_groups_lower_compatibility(self):
        guests = [guest(g, group=g.upper(), table_id="t1") for g in "abc"]
        assert compute_table_stats(guests, [Table("t1", 3)])[0]["compatibility"] == 95

    def test_grade_thresholds(self):
        graded = grade_tables([{"compatibility": c} for c in (90, 70, 50, 49)])
        assert [g["grade"] for g in graded] == ["Excellent", "Good", "Fair", "Needs Work"]
