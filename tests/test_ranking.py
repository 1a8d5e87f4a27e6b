"""Tests for the Top-N party ranking and chart series."""

from o2d.dispatch_dashboard.constants import CHART_PALETTE, OTHERS_COLOR, OTHERS_LABEL
from o2d.dispatch_dashboard.ranking import chart_series, rank_parties


def _rows(counts):
    """counts: list of (party, n) in the order rows should appear."""
    rows = []
    for party, n in counts:
        rows.extend({"partyName": party, "itemName": f"Item {i % 2}"} for i in range(n))
    return rows


class TestRankParties:

    def test_eleven_parties_fold_the_last_into_others(self, make_frame):
        counts = [(f"Party {i:02d}", 20 - i) for i in range(11)]
        ranking = rank_parties(make_frame(_rows(counts)))

        assert len(ranking.entries) == 10
        assert [e.rank for e in ranking.entries] == list(range(1, 11))
        assert ranking.entries[0].name == "Party 00"
        assert ranking.others is not None
        assert ranking.others.name == OTHERS_LABEL
        assert ranking.others.count == 10
        assert ranking.others.is_others

    def test_others_sums_every_remaining_party(self, make_frame):
        counts = [(f"P{i}", 5) for i in range(10)] + [("Q1", 2), ("Q2", 1), ("Q3", 1)]
        ranking = rank_parties(make_frame(_rows(counts)))
        assert ranking.others.count == 4

    def test_party_with_two_rows_ranks_first(self, make_frame):
        names = [f"Party {i:02d}" for i in range(10)]
        records = [{"partyName": names[0]}, {"partyName": "Acme"}]
        records += [{"partyName": name} for name in names[1:]]
        records.append({"partyName": "Acme"})

        ranking = rank_parties(make_frame(records))

        assert len(records) == 12
        assert ranking.entries[0].name == "Acme"
        assert ranking.entries[0].rank == 1
        assert ranking.entries[0].count == 2
        assert [e.name for e in ranking.entries[1:]] == names[:9]
        assert ranking.others.count == 1

    def test_exactly_ten_parties_has_no_others(self, make_frame):
        ranking = rank_parties(make_frame(_rows([(f"P{i}", 1) for i in range(10)])))
        assert len(ranking.entries) == 10
        assert ranking.others is None
        assert len(ranking.all_entries()) == 10

    def test_sorted_by_count_descending(self, make_frame):
        ranking = rank_parties(make_frame(_rows([("Low", 1), ("High", 3), ("Mid", 2)])))
        assert [e.name for e in ranking.entries] == ["High", "Mid", "Low"]
        assert [e.count for e in ranking.entries] == [3, 2, 1]

    def test_ties_keep_first_seen_order(self, make_frame):
        records = [
            {"partyName": "Zeta"}, {"partyName": "Alpha"}, {"partyName": "Mu"},
            {"partyName": "Alpha"}, {"partyName": "Zeta"}, {"partyName": "Mu"},
        ]
        ranking = rank_parties(make_frame(records))
        assert [e.name for e in ranking.entries] == ["Zeta", "Alpha", "Mu"]

    def test_blank_party_names_ignored(self, make_frame):
        ranking = rank_parties(make_frame([{"partyName": "  "}, {"itemName": "X"}, {"partyName": "A"}]))
        assert [e.name for e in ranking.entries] == ["A"]

    def test_party_names_are_trimmed_before_grouping(self, make_frame):
        ranking = rank_parties(make_frame([{"partyName": "A "}, {"partyName": " A"}]))
        assert ranking.entries[0].count == 2

    def test_items_distinct_in_first_seen_order(self, make_frame):
        records = [
            {"partyName": "A", "itemName": "Wire Rod"},
            {"partyName": "A", "itemName": "TMT Bar"},
            {"partyName": "A", "itemName": "Wire Rod"},
            {"partyName": "A"},
        ]
        entry = rank_parties(make_frame(records)).entries[0]
        assert entry.items == ("Wire Rod", "TMT Bar")
        assert entry.items_text == "Wire Rod, TMT Bar"

    def test_empty_frame(self, make_frame):
        ranking = rank_parties(make_frame([]))
        assert not ranking
        assert ranking.others is None
        assert ranking.to_dataframe().empty

    def test_custom_top_n(self, make_frame):
        ranking = rank_parties(make_frame(_rows([("A", 3), ("B", 2), ("C", 1)])), top_n=2)
        assert [e.name for e in ranking.entries] == ["A", "B"]
        assert ranking.others.count == 1


class TestChartSeries:

    def test_palette_cycles_and_others_is_neutral(self, make_frame):
        counts = [(f"Party {i:02d}", 20 - i) for i in range(11)]
        slices = chart_series(rank_parties(make_frame(_rows(counts))))

        assert len(slices) == 11
        assert slices[0].color == CHART_PALETTE[0]
        assert slices[8].color == CHART_PALETTE[0]
        assert slices[9].color == CHART_PALETTE[1]
        assert slices[-1].name == OTHERS_LABEL
        assert slices[-1].color == OTHERS_COLOR

    def test_values_match_counts(self, make_frame):
        slices = chart_series(rank_parties(make_frame(_rows([("A", 2), ("B", 1)]))))
        assert [(s.name, s.value) for s in slices] == [("A", 2), ("B", 1)]
