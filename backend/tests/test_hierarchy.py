"""
Tests for the hierarchy codec: ancestor pointers, tree building and
decoding of the JSON text columns.
"""

import pytest

from app.exceptions import InvalidRequestError
from app.services.hierarchy import (
    build_tree,
    compute_ancestor_pointers,
    decode_stored_fields,
    encode_stored_fields,
    flatten_tree,
    level_field,
)


def row(id, level, parent_id, l1=0, l2=0, l3=0, l4=0, **extra):
    """A stored task row with its ancestor pointers."""
    return {
        "id": id,
        "name": f"task-{id}",
        "task_level": level,
        "parent_id": parent_id,
        "level1_id": l1,
        "level2_id": l2,
        "level3_id": l3,
        "level4_id": l4,
        **extra,
    }


# T1(1) -> S(2) -> A(3) -> X(4), plus a second subtask and a second root
FLAT_TASKS = [
    row(1, 1, 0, l1=1),
    row(2, 2, 1, l1=1, l2=2),
    row(3, 3, 2, l1=1, l2=2, l3=3),
    row(4, 4, 3, l1=1, l2=2, l3=3, l4=4),
    row(5, 2, 1, l1=1, l2=5),
    row(6, 1, 0, l1=6),
]


class TestLevelField:

    @pytest.mark.parametrize("level", [1, 2, 3, 4])
    def test_valid_levels(self, level):
        assert level_field(level) == f"level{level}_id"

    @pytest.mark.parametrize("level", [0, 5, -1])
    def test_invalid_level_rejected(self, level):
        with pytest.raises(InvalidRequestError):
            level_field(level)


class TestComputeAncestorPointers:

    def test_root_task_has_no_ancestors(self):
        assert compute_ancestor_pointers(None, 1) == {
            "level1_id": 0, "level2_id": 0, "level3_id": 0, "level4_id": 0,
        }

    def test_subtask_inherits_from_level1_parent(self):
        parent = row(10, 1, 0, l1=10)
        assert compute_ancestor_pointers(parent, 2) == {
            "level1_id": 10, "level2_id": 0, "level3_id": 0, "level4_id": 0,
        }

    def test_action_item_inherits_both_levels(self):
        parent = row(7, 2, 3, l1=3, l2=7)
        pointers = compute_ancestor_pointers(parent, 3)
        assert pointers == {"level1_id": 3, "level2_id": 7, "level3_id": 0, "level4_id": 0}

    def test_sub_action_item_inherits_three_levels(self):
        parent = row(9, 3, 7, l1=3, l2=7, l3=9)
        pointers = compute_ancestor_pointers(parent, 4)
        assert pointers == {"level1_id": 3, "level2_id": 7, "level3_id": 9, "level4_id": 0}

    def test_falls_back_to_parent_id_when_self_pointer_missing(self):
        """A parent whose own-level pointer was never patched still counts as that ancestor."""
        parent = row(7, 2, 3, l1=3, l2=0)
        pointers = compute_ancestor_pointers(parent, 3)
        assert pointers["level2_id"] == 7

    def test_levels_at_and_above_new_task_are_zero(self):
        # Parent carries junk in the higher levels; it must not leak through
        parent = row(7, 2, 3, l1=3, l2=7, l3=99, l4=98)
        pointers = compute_ancestor_pointers(parent, 3)
        assert pointers["level3_id"] == 0
        assert pointers["level4_id"] == 0

    def test_invalid_level_rejected(self):
        with pytest.raises(InvalidRequestError):
            compute_ancestor_pointers(row(1, 4, 0), 5)


class TestBuildTree:

    def test_nests_children_under_level_specific_fields(self):
        tree = build_tree(FLAT_TASKS)

        assert [node["id"] for node in tree] == [1, 6]
        t1 = tree[0]
        assert [node["id"] for node in t1["subtasks"]] == [2, 5]

        subtask = t1["subtasks"][0]
        assert [node["id"] for node in subtask["action_items"]] == [3]

        action_item = subtask["action_items"][0]
        assert [node["id"] for node in action_item["subaction_items"]] == [4]

    def test_leaf_fields(self):
        tree = build_tree(FLAT_TASKS)
        sub_action = tree[0]["subtasks"][0]["action_items"][0]["subaction_items"][0]

        # Level-4 nodes have no children field at all
        assert "subtasks" not in sub_action
        assert "action_items" not in sub_action
        assert "subaction_items" not in sub_action

        # Empty levels are empty lists
        assert tree[1]["subtasks"] == []
        assert tree[0]["subtasks"][1]["action_items"] == []

    def test_orphans_with_wrong_level_are_skipped(self):
        # parent 1 is level 1, but this row claims level 3
        tasks = FLAT_TASKS + [row(7, 3, 1, l1=1, l3=7)]
        tree = build_tree(tasks)
        flat_ids = [node["id"] for node in flatten_tree(tree)]
        assert 7 not in flat_ids

    def test_does_not_mutate_input(self):
        tasks = [dict(task) for task in FLAT_TASKS]
        build_tree(tasks)
        assert tasks == FLAT_TASKS

    def test_subtree_from_custom_root(self):
        subtree = build_tree(FLAT_TASKS, parent_id=2, level=3)
        assert [node["id"] for node in subtree] == [3]
        assert subtree[0]["subaction_items"][0]["id"] == 4

    def test_empty(self):
        assert build_tree([]) == []

    def test_round_trip(self):
        tree = build_tree(FLAT_TASKS)
        assert build_tree(flatten_tree(tree)) == tree

    def test_flatten_is_preorder(self):
        tree = build_tree(FLAT_TASKS)
        assert [task["id"] for task in flatten_tree(tree)] == [1, 2, 3, 4, 5, 6]


class TestDecodeStoredFields:

    def test_decodes_json_text(self):
        task = decode_stored_fields({"id": 1, "est_prev_hours": "[3, 4.5]", "info": '{"color": "red"}'})
        assert task["est_prev_hours"] == [3, 4.5]
        assert task["info"] == {"color": "red"}

    @pytest.mark.parametrize("stored", ["{not json", "", "   ", None, "null", "[1, 2]", "42"])
    def test_bad_info_decodes_to_empty_document(self, stored):
        task = decode_stored_fields({"id": 1, "est_prev_hours": "[]", "info": stored})
        assert task["info"] == {}

    @pytest.mark.parametrize("stored", ["[1,", "", None, "null", '{"a": 1}'])
    def test_bad_history_decodes_to_empty_list(self, stored):
        task = decode_stored_fields({"id": 1, "est_prev_hours": stored, "info": "{}"})
        assert task["est_prev_hours"] == []

    def test_already_decoded_values_pass_through(self):
        task = decode_stored_fields({"id": 1, "est_prev_hours": [2], "info": {"a": 1}})
        assert task["est_prev_hours"] == [2]
        assert task["info"] == {"a": 1}

    def test_defaults_are_not_shared(self):
        first = decode_stored_fields({"id": 1, "info": "oops"})
        second = decode_stored_fields({"id": 2, "info": "oops"})
        first["info"]["x"] = 1
        assert second["info"] == {}

    def test_encode(self):
        encoded = encode_stored_fields({"name": "a", "est_prev_hours": [1.5], "info": {"k": "v"}})
        assert encoded == {"name": "a", "est_prev_hours": "[1.5]", "info": '{"k": "v"}'}
        assert decode_stored_fields(encoded)["info"] == {"k": "v"}


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
