from datetime import datetime

from pctcup.models import CategoryKey, CategoryUnit, ClassType
from pctcup.services.checkpoints import checkpoint_boundary
from pctcup.services.requirements import (
    CategoryTally,
    RequirementKey,
    completed_by_category_for_user,
    completed_by_category_for_users,
    evaluate_category,
    evaluate_user,
    load_categories,
    requirement_map,
    user_meets_checkpoint,
)


def test_category_unit_follows_key(cup):
    assert cup.service.unit == CategoryUnit.SERVICE_HOURS
    assert cup.chapter.unit == CategoryUnit.EVENT_COUNT
    assert cup.service.unit_label == "hrs"
    assert cup.chapter.unit_label == "events"


def test_requirement_map_is_keyed_by_class_type_category_checkpoint(session, cup):
    reqs = requirement_map(session, cup.cp1.id)
    assert reqs[RequirementKey(ClassType.NON_GRAD, cup.chapter.id, cup.cp1.id)] == 1
    assert reqs[RequirementKey(ClassType.SENIOR, cup.service.id, cup.cp1.id)] == 1
    assert RequirementKey(ClassType.NON_GRAD, cup.chapter.id, cup.cp2.id) not in reqs


def test_zero_requirement_is_always_met(cup):
    progress = evaluate_category(cup.chapter, None, 0)
    assert progress.met
    assert progress.remaining_needed == 0
    assert progress.ratio == 1.0


def test_remaining_needed_never_goes_negative(cup):
    progress = evaluate_category(cup.chapter, CategoryTally(count=5, service_hours=0), 2)
    assert progress.completed == 5
    assert progress.remaining_needed == 0
    assert progress.ratio == 1.0


def test_service_counts_hours_not_events(session, make, cup):
    bro = make.user("alex")
    e = make.event(cup.service, datetime(2026, 2, 1, 10), service_hours=2)
    make.attend(e, bro)

    tallies = completed_by_category_for_user(session, bro.id, checkpoint_boundary(cup.cp1))
    progress = evaluate_category(cup.service, tallies.get(cup.service.id), 3)
    assert progress.completed == 2
    assert progress.remaining_needed == 1
    assert not progress.met


def test_attendance_on_checkpoint_end_date_counts_but_next_day_does_not(session, make, cup):
    bro = make.user("alex")
    late_same_day = make.event(cup.chapter, datetime(2026, 2, 11, 21, 30))
    next_day = make.event(cup.chapter, datetime(2026, 2, 12, 0, 0))
    make.attend(late_same_day, bro)
    make.attend(next_day, bro)

    tallies = completed_by_category_for_user(session, bro.id, checkpoint_boundary(cup.cp1))
    assert tallies[cup.chapter.id].count == 1


def test_absent_rows_are_ignored(session, make, cup):
    bro = make.user("alex")
    e = make.event(cup.chapter, datetime(2026, 2, 1))
    make.attend(e, bro, present=False)

    assert completed_by_category_for_user(session, bro.id, checkpoint_boundary(cup.cp1)) == {}


def test_bulk_aggregation_groups_per_user(session, make, cup):
    a, b, c = make.user("a"), make.user("b"), make.user("c")
    e1 = make.event(cup.chapter, datetime(2026, 1, 20))
    e2 = make.event(cup.chapter, datetime(2026, 1, 27))
    s1 = make.event(cup.service, datetime(2026, 1, 30), service_hours=4)
    make.attend(e1, a, b)
    make.attend(e2, a)
    make.attend(s1, b)

    tallies = completed_by_category_for_users(session, [a.id, b.id, c.id], checkpoint_boundary(cup.cp1))
    assert tallies[a.id][cup.chapter.id].count == 2
    assert tallies[b.id][cup.chapter.id].count == 1
    assert tallies[b.id][cup.service.id].service_hours == 4
    assert c.id not in tallies
    assert completed_by_category_for_users(session, [], checkpoint_boundary(cup.cp1)) == {}


def test_met_scenario_for_checkpoint_one(session, make, cup):
    bro = make.user("alex")
    e = make.event(cup.chapter, datetime(2026, 2, 10, 19))
    make.attend(e, bro)

    categories = load_categories(session)
    reqs = requirement_map(session, cup.cp1.id)
    tallies = completed_by_category_for_user(session, bro.id, checkpoint_boundary(cup.cp1))
    chapter, service = evaluate_user(categories, reqs, cup.cp1, ClassType.NON_GRAD, tallies)

    assert chapter.category.key == CategoryKey.CHAPTER
    assert (chapter.completed, chapter.required, chapter.remaining_needed, chapter.met) == (1, 1, 0, True)
    assert (service.completed, service.required, service.remaining_needed) == (0, 3, 3)
    assert not user_meets_checkpoint(categories, reqs, cup.cp1, ClassType.NON_GRAD, tallies)


def test_class_type_selects_thresholds(session, make, cup):
    senior = make.user("sam", class_type=ClassType.SENIOR)
    e = make.event(cup.service, datetime(2026, 2, 2), service_hours=1)
    make.attend(e, senior)

    categories = load_categories(session)
    reqs = requirement_map(session, cup.cp1.id)
    tallies = completed_by_category_for_user(session, senior.id, checkpoint_boundary(cup.cp1))

    assert user_meets_checkpoint(categories, reqs, cup.cp1, ClassType.SENIOR, tallies)
    assert not user_meets_checkpoint(categories, reqs, cup.cp1, ClassType.NON_GRAD, tallies)
