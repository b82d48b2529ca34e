import pytest

from perfboard.org.exceptions import DepartmentCycleError
from perfboard.org.exceptions import DepartmentInUseError
from perfboard.org.exceptions import StructureError
from perfboard.org.exceptions import UnknownDepartmentError
from perfboard.org.tree import DepartmentRecord
from perfboard.org.tree import build_tree
from perfboard.org.tree import check_deactivation
from perfboard.org.tree import check_reparent
from perfboard.org.tree import render_label
from perfboard.org.tree import validate_hierarchy
from perfboard.users.records import TeamMember
from perfboard.users.roles import Role


@pytest.fixture
def departments():
    return [
        DepartmentRecord(id=1, name="Engineering"),
        DepartmentRecord(id=2, name="Backend", parent_id=1),
        DepartmentRecord(id=3, name="Frontend", parent_id=1),
        DepartmentRecord(id=4, name="Platform", parent_id=2),
        DepartmentRecord(id=5, name="Sales"),
    ]


def test_build_tree_groups_children_under_parents(departments):
    tree = build_tree(departments)

    assert [r.id for r in tree.roots] == [1, 5]
    engineering = tree.node(1)
    assert [c.id for c in engineering.children] == [2, 3]
    assert tree.parent_id(4) == 2
    assert len(tree) == 5


def test_missing_or_inactive_parent_becomes_root():
    tree = build_tree(
        [
            DepartmentRecord(id=1, name="Closed", is_active=False),
            DepartmentRecord(id=2, name="Orphan", parent_id=1),
            DepartmentRecord(id=3, name="Lost", parent_id=99),
        ]
    )

    assert [r.id for r in tree.roots] == [1, 2, 3]
    assert tree.parent_id(2) is None


def test_cyclic_departments_still_appear_once(caplog):
    records = [
        DepartmentRecord(id=10, name="A", parent_id=11),
        DepartmentRecord(id=11, name="B", parent_id=10),
        DepartmentRecord(id=12, name="C", parent_id=11),
    ]

    tree = build_tree(records)

    flat_ids = [row.department.id for row in tree.flatten()]
    assert sorted(flat_ids) == [10, 11, 12]
    assert [r.id for r in tree.roots] == [10]
    assert "parent cycle" in caplog.text


def test_flatten_is_depth_first_with_lineage(departments):
    rows = build_tree(departments).flatten()

    assert [(r.department.name, r.level, r.is_last) for r in rows] == [
        ("Engineering", 0, False),
        ("Backend", 1, False),
        ("Platform", 2, True),
        ("Frontend", 1, True),
        ("Sales", 0, True),
    ]
    assert rows[2].lineage == (False,)


def test_flatten_exclude_drops_whole_subtree(departments):
    rows = build_tree(departments).flatten(exclude_id=2)

    assert [r.department.id for r in rows] == [1, 3, 5]
    # Frontend is now the only, hence last, child of Engineering
    assert rows[1].is_last is True


def test_render_label_draws_connectors(departments):
    departments.append(
        DepartmentRecord(id=6, name="Legacy", parent_id=5, is_active=False)
    )
    rows = build_tree(departments).flatten()

    labels = [render_label(r) for r in rows]

    assert labels == [
        "Engineering",
        "├── Backend",
        "│   └── Platform",
        "└── Frontend",
        "Sales",
        "└── Legacy (Inactive)",
    ]


def test_is_descendant_walks_any_depth(departments):
    tree = build_tree(departments)

    assert tree.is_descendant(2, 1)
    assert tree.is_descendant(4, 1)
    assert not tree.is_descendant(1, 4)
    assert not tree.is_descendant(1, 1)
    assert not tree.is_descendant(5, 1)
    assert not tree.is_descendant(404, 1)


def test_descendants_excludes_the_department_itself(departments):
    tree = build_tree(departments)

    assert tree.descendants(1) == {2, 3, 4}
    assert tree.descendants(4) == set()
    assert tree.subtree(2) == {2, 4}
    assert tree.descendants(404) == set()


def test_validate_hierarchy_accepts_a_forest(departments):
    validate_hierarchy(departments)


def test_validate_hierarchy_rejects_loops():
    records = [
        DepartmentRecord(id=1, name="A", parent_id=3),
        DepartmentRecord(id=2, name="B", parent_id=1),
        DepartmentRecord(id=3, name="C", parent_id=2),
    ]

    with pytest.raises(DepartmentCycleError) as excinfo:
        validate_hierarchy(records)

    assert excinfo.value.department_id == 1
    assert excinfo.value.chain == (1, 3, 2, 1)


def test_validate_hierarchy_rejects_own_parent():
    with pytest.raises(DepartmentCycleError):
        validate_hierarchy([DepartmentRecord(id=7, name="Self", parent_id=7)])


def test_validate_hierarchy_tolerates_missing_parent():
    validate_hierarchy([DepartmentRecord(id=1, name="A", parent_id=42)])


def test_check_reparent_refuses_descendant_as_parent(departments):
    with pytest.raises(DepartmentCycleError) as excinfo:
        check_reparent(departments, 1, 4)

    assert excinfo.value.chain == (1, 4, 2, 1)


def test_check_reparent_refuses_self_and_unknown(departments):
    with pytest.raises(DepartmentCycleError):
        check_reparent(departments, 2, 2)
    with pytest.raises(UnknownDepartmentError):
        check_reparent(departments, 2, 99)


def test_check_reparent_accepts_valid_moves(departments):
    check_reparent(departments, 2, 3)
    check_reparent(departments, 4, 5)
    check_reparent(departments, 2, None)


def test_check_deactivation_counts_members_and_children(departments):
    members = [TeamMember(id=100, role=Role.EMPLOYEE, home_department_id=3)]

    with pytest.raises(DepartmentInUseError) as excinfo:
        check_deactivation(departments, members, 3)
    assert excinfo.value.active_employees == 1

    with pytest.raises(StructureError) as excinfo:
        check_deactivation(departments, [], 1)
    assert excinfo.value.active_children == 2

    check_deactivation(departments, members, 5)


def test_traversal_follows_declared_links_through_inactive_departments():
    tree = build_tree(
        [
            DepartmentRecord(id=1, name="Engineering"),
            DepartmentRecord(id=2, name="Old", parent_id=1, is_active=False),
            DepartmentRecord(id=3, name="Team", parent_id=2),
        ]
    )

    # Team renders as a root but still sits below Engineering
    assert tree.parent_id(3) is None
    assert tree.is_descendant(3, 1)
    assert tree.descendants(1) == {2, 3}
    assert tree.subtree(1) == {1, 2, 3}


DEEP_FOREST = [
    DepartmentRecord(id=1, name="Engineering"),
    DepartmentRecord(id=2, name="Backend", parent_id=1),
    DepartmentRecord(id=3, name="Platform", parent_id=2),
    DepartmentRecord(id=4, name="Storage", parent_id=3),
    DepartmentRecord(id=5, name="Frontend", parent_id=1),
    DepartmentRecord(id=6, name="Sales"),
    DepartmentRecord(id=7, name="Inside Sales", parent_id=6),
]

ORDERINGS = {
    "parents-first": [0, 1, 2, 3, 4, 5, 6],
    "children-first": [6, 5, 4, 3, 2, 1, 0],
    "shuffled": [3, 6, 0, 4, 2, 5, 1],
}


@pytest.fixture(params=list(ORDERINGS), ids=list(ORDERINGS))
def ordered_forest(request):
    return [DEEP_FOREST[idx] for idx in ORDERINGS[request.param]]


def test_validate_hierarchy_accepts_any_ordering(ordered_forest):
    validate_hierarchy(ordered_forest)


def test_flatten_visits_each_department_once_in_any_ordering(ordered_forest):
    rows = build_tree(ordered_forest).flatten()

    ids = [row.department.id for row in rows]
    assert sorted(ids) == [1, 2, 3, 4, 5, 6, 7]
    position = {dept_id: idx for idx, dept_id in enumerate(ids)}
    for record in DEEP_FOREST:
        if record.parent_id is not None:
            assert position[record.parent_id] < position[record.id]
    levels = {row.department.id: row.level for row in rows}
    assert levels[4] == 3


def test_traversal_is_independent_of_ordering(ordered_forest):
    tree = build_tree(ordered_forest)

    assert [r.id for r in tree.roots] == sorted(
        (r.id for r in tree.roots),
        key=[d.id for d in ordered_forest].index,
    )
    assert {r.id for r in tree.roots} == {1, 6}
    assert tree.descendants(1) == {2, 3, 4, 5}
    assert tree.is_descendant(4, 1)
    assert not tree.is_descendant(7, 1)
