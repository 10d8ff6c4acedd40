"""
Unit tests for ID <-> name translation.

Tests cover:
- IDs to names: unchanged records, resolution, drops, ordering
- Names to IDs: pairing requirement, resolution, drops
- Round-trip through both directions
"""

from grantmatrix.directory import DirectorySnapshot
from grantmatrix.matrix import count_dropped, translate_to_ids, translate_to_names
from grantmatrix.schema import Authorization


def make(action: str, realm: str | None = None, group: str | None = None) -> Authorization:
    return Authorization(
        realm_id="master",
        group_id="g1",
        action=action,
        target_realm_id=realm,
        target_group_id=group,
    )


class TestTranslateToNames:
    """Tests for translate_to_names."""

    def test_resolves_known_group(self) -> None:
        """Known target group IDs become names."""
        result = translate_to_names([make("read", "R1", "G1")], {"G1": "operators"})
        assert result == [make("read", "R1", "operators")]

    def test_without_target_group_unchanged(self) -> None:
        """Records with no target group are copied as-is."""
        records = [make("list"), make("write", "R2")]
        assert translate_to_names(records, {}) == records

    def test_unknown_group_dropped(self) -> None:
        """Unresolvable target groups drop the record."""
        result = translate_to_names([make("read", "R1", "G9")], {"G1": "operators"})
        assert result == []

    def test_wildcard_always_resolves(self) -> None:
        """The '*' sentinel is always present."""
        result = translate_to_names([make("read", "R1", "*")], {})
        assert result == [make("read", "R1", "*")]

    def test_order_preserved_without_gaps(self) -> None:
        """Output follows input order with drops omitted."""
        records = [
            make("a", "R1", "G1"),
            make("b", "R1", "G9"),
            make("c"),
            make("d", "R1", "G2"),
        ]
        result = translate_to_names(records, {"G1": "operators", "G2": "auditors"})
        assert [r.action for r in result] == ["a", "c", "d"]

    def test_input_not_mutated(self) -> None:
        """The lookup table and records are left untouched."""
        names = {"G1": "operators"}
        records = [make("read", "R1", "G1")]
        translate_to_names(records, names)
        assert names == {"G1": "operators"}
        assert records[0].target_group_id == "G1"


class TestTranslateToIds:
    """Tests for translate_to_ids."""

    def test_resolves_known_group(self, snapshot: DirectorySnapshot) -> None:
        """Names resolve through the realm's mapper."""
        result = translate_to_ids([make("read", "R1", "auditors")], snapshot.name_mapper())
        assert result == [make("read", "R1", "G2")]

    def test_unknown_group_dropped(self, snapshot: DirectorySnapshot) -> None:
        """Unknown names drop the record."""
        assert translate_to_ids([make("read", "R1", "ghosts")], snapshot.name_mapper()) == []

    def test_unknown_realm_dropped(self, snapshot: DirectorySnapshot) -> None:
        """A realm missing from the mapper drops the record."""
        assert translate_to_ids([make("read", "R9", "operators")], snapshot.name_mapper()) == []

    def test_group_looked_up_in_its_own_realm(self, snapshot: DirectorySnapshot) -> None:
        """A name from another realm does not resolve."""
        assert translate_to_ids([make("read", "R2", "operators")], snapshot.name_mapper()) == []

    def test_group_without_realm_is_cleared(self, snapshot: DirectorySnapshot) -> None:
        """Without a target realm the target group is cleared, not dropped."""
        result = translate_to_ids([make("read", None, "operators")], snapshot.name_mapper())
        assert result == [make("read")]

    def test_realm_without_group_kept(self, snapshot: DirectorySnapshot) -> None:
        """A target realm alone passes through."""
        result = translate_to_ids([make("read", "R1")], snapshot.name_mapper())
        assert result == [make("read", "R1")]

    def test_wildcards_resolve(self, snapshot: DirectorySnapshot) -> None:
        """'*' resolves in every realm and in the '*' realm."""
        records = [make("a", "R1", "*"), make("b", "*", "*")]
        assert translate_to_ids(records, snapshot.name_mapper()) == records

    def test_realm_never_translated(self) -> None:
        """Only the group dimension changes."""
        result = translate_to_ids([make("read", "R1", "ops")], {"R1": {"ops": "G1"}})
        assert result[0].target_realm_id == "R1"


class TestRoundTrip:
    """Round-trip and drop-count properties."""

    def test_lossless_round_trip(self, snapshot: DirectorySnapshot) -> None:
        """Resolvable records survive ids -> names -> ids unchanged."""
        records = [make("read", "R1", "G1"), make("read", "R1", "G2"), make("list", "R1")]
        names = translate_to_names(records, snapshot.names_by_id("R1"))
        assert translate_to_ids(names, snapshot.name_mapper()) == records

    def test_drop_count(self, snapshot: DirectorySnapshot) -> None:
        """Output shrinks by exactly the number of unresolvable records."""
        records = [make("a", "R1", "G1"), make("b", "R1", "G8"), make("c", "R1", "G9")]
        result = translate_to_names(records, snapshot.names_by_id("R1"))
        assert count_dropped(records, result) == 2

    def test_dropped_record_absent_in_both_directions(self, snapshot: DirectorySnapshot) -> None:
        """A stale reference never reappears."""
        records = [make("a", "R1", "G1"), make("b", "R1", "G9")]
        names = translate_to_names(records, snapshot.names_by_id("R1"))
        ids = translate_to_ids(names, snapshot.name_mapper())
        assert [r.action for r in ids] == ["a"]
