"""Tests for the per-user scoped record store and its repositories."""

from datetime import date
from decimal import Decimal

from lifeledger.models.habit import Habit, HabitLog, HabitType
from lifeledger.models.transaction import Transaction, TransactionCategory, TransactionKind
from lifeledger.store import HABIT_LOGS, HABITS, TRANSACTIONS


def _expense(amount="10", category=TransactionCategory.FOOD, on=date(2024, 1, 5)):
    return Transaction(
        kind=TransactionKind.EXPENSE,
        category=category,
        amount=Decimal(amount),
        date=on,
    )


class TestOwnership:
    """Records are stamped with and filtered by the current user."""

    def test_logged_out_reads_are_empty(self, habits):
        assert habits.list_habits() == []

    def test_logged_out_writes_are_skipped(self, habits, storage):
        assert habits.save_habit(Habit(title="Read")) is None
        assert storage.read(HABITS.key) is None

    def test_save_stamps_owner_over_caller_value(self, habits, login_as):
        user_id = login_as()
        saved = habits.save_habit(Habit(title="Read", owner_user_id="someone_else"))
        assert saved.owner_user_id == user_id
        assert habits.list_habits()[0].owner_user_id == user_id

    def test_users_do_not_see_each_other(self, habits, login_as, identity):
        login_as("a@example.com", "secret1", "A")
        habits.save_habit(Habit(title="A's habit"))
        identity.logout()

        login_as("b@example.com", "secret1", "B")
        assert habits.list_habits() == []
        habits.save_habit(Habit(title="B's habit"))
        assert [h.title for h in habits.list_habits()] == ["B's habit"]

    def test_delete_with_another_users_id_is_noop(self, habits, login_as, identity, storage):
        login_as("a@example.com", "secret1", "A")
        theirs = habits.save_habit(Habit(title="A's habit"))
        identity.logout()

        login_as("b@example.com", "secret1", "B")
        assert habits.delete_habit(theirs.id) is False
        assert len(storage.read(HABITS.key)) == 1

    def test_save_with_another_users_id_does_not_overwrite(self, habits, login_as, identity, storage):
        login_as("a@example.com", "secret1", "A")
        theirs = habits.save_habit(Habit(title="A's habit"))
        identity.logout()

        login_as("b@example.com", "secret1", "B")
        habits.save_habit(Habit(id=theirs.id, title="Hijack"))
        titles = sorted(item["title"] for item in storage.read(HABITS.key))
        assert titles == ["A's habit", "Hijack"]

    def test_malformed_items_survive_writes(self, habits, login_as, storage):
        user_id = login_as()
        storage.write(HABITS.key, [{"owner_user_id": user_id, "garbage": True}])

        habits.save_habit(Habit(title="Read"))

        assert [h.title for h in habits.list_habits()] == ["Read"]
        assert {"owner_user_id": user_id, "garbage": True} in storage.read(HABITS.key)

    def test_non_list_collection_reads_as_empty(self, habits, login_as, storage):
        login_as()
        storage.write(HABITS.key, {"not": "a list"})
        assert habits.list_habits() == []


class TestHabitRepository:
    """Habit-specific behavior on top of the scoped store."""

    def test_newest_first(self, habits, login_as):
        login_as()
        habits.save_habit(Habit(title="first"))
        habits.save_habit(Habit(title="second"))
        assert [h.title for h in habits.list_habits()] == ["second", "first"]

    def test_one_log_per_habit_and_day(self, habits, login_as):
        login_as()
        habit = habits.save_habit(Habit(title="Water", type=HabitType.NUMBER))
        day = date(2024, 1, 1)

        habits.save_log(HabitLog.for_habit(habit, day, 3))
        habits.save_log(HabitLog.for_habit(habit, day, 5))

        logs = habits.list_logs(habit.id)
        assert len(logs) == 1
        assert logs[0].value == 5

    def test_logs_for_different_days_are_kept(self, habits, login_as):
        login_as()
        habit = habits.save_habit(Habit(title="Run"))
        habits.save_log(HabitLog.for_habit(habit, date(2024, 1, 1)))
        habits.save_log(HabitLog.for_habit(habit, date(2024, 1, 2)))
        assert len(habits.list_logs(habit.id)) == 2

    def test_delete_habit_cascades_to_logs(self, habits, login_as):
        login_as()
        keep = habits.save_habit(Habit(title="Keep"))
        drop = habits.save_habit(Habit(title="Drop"))
        habits.save_log(HabitLog.for_habit(keep, date(2024, 1, 1)))
        habits.save_log(HabitLog.for_habit(drop, date(2024, 1, 1)))
        habits.save_log(HabitLog.for_habit(drop, date(2024, 1, 2)))

        assert habits.delete_habit(drop.id) is True

        assert [h.id for h in habits.list_habits()] == [keep.id]
        assert [log.habit_id for log in habits.list_logs()] == [keep.id]

    def test_cascade_leaves_other_users_logs(self, habits, login_as, identity, storage):
        login_as("a@example.com", "secret1", "A")
        habit = habits.save_habit(Habit(title="Shared id"))
        identity.logout()

        login_as("b@example.com", "secret1", "B")
        habits.save_habit(Habit(id=habit.id, title="Same id"))
        habits.save_log(HabitLog.for_habit(habit, date(2024, 1, 1)))
        identity.logout()

        login_as("a@example.com", "secret1", "A")
        habits.save_log(HabitLog.for_habit(habit, date(2024, 1, 1)))
        habits.delete_habit(habit.id)

        assert len(storage.read(HABIT_LOGS.key)) == 1


class TestTransactionRepository:
    def test_update_in_place(self, transactions, login_as):
        login_as()
        older = transactions.save_transaction(_expense("10"))
        transactions.save_transaction(_expense("20"))

        edited = older.model_copy(update={"amount": Decimal("15")})
        assert transactions.update_transaction(edited) is True

        listed = transactions.list_transactions()
        assert [t.amount for t in listed] == [Decimal("20"), Decimal("15")]

    def test_update_unknown_id_is_noop(self, transactions, login_as):
        login_as()
        assert transactions.update_transaction(_expense()) is False
        assert transactions.list_transactions() == []

    def test_delete(self, transactions, login_as, storage):
        login_as()
        t = transactions.save_transaction(_expense())
        assert transactions.delete_transaction(t.id) is True
        assert transactions.delete_transaction(t.id) is False
        assert storage.read(TRANSACTIONS.key) == []


class TestNotifications:
    """Listeners hear about writes, and only about writes."""

    def test_save_publishes(self, habits, login_as, notifier):
        login_as()
        calls = []
        notifier.subscribe(lambda: calls.append(1))
        habits.save_habit(Habit(title="Read"))
        assert calls == [1]

    def test_failed_delete_does_not_publish(self, habits, login_as, notifier):
        login_as()
        calls = []
        notifier.subscribe(lambda: calls.append(1))
        habits.delete_habit("missing")
        assert calls == []

    def test_cascade_publishes_once(self, habits, login_as, notifier):
        login_as()
        habit = habits.save_habit(Habit(title="Read"))
        habits.save_log(HabitLog.for_habit(habit, date(2024, 1, 1)))
        calls = []
        notifier.subscribe(lambda: calls.append(1))

        habits.delete_habit(habit.id)

        assert calls == [1]

    def test_listener_sees_committed_data(self, habits, login_as, notifier):
        login_as()
        seen = []
        notifier.subscribe(lambda: seen.append(len(habits.list_habits())))
        habits.save_habit(Habit(title="Read"))
        assert seen == [1]

    def test_failing_listener_does_not_break_write(self, habits, login_as, notifier):
        login_as()
        calls = []

        def boom():
            raise RuntimeError("listener bug")

        notifier.subscribe(boom)
        notifier.subscribe(lambda: calls.append(1))
        saved = habits.save_habit(Habit(title="Read"))

        assert saved is not None
        assert calls == [1]

    def test_unsubscribe(self, notifier):
        calls = []
        unsubscribe = notifier.subscribe(lambda: calls.append(1))
        unsubscribe()
        notifier.publish()
        assert calls == []
        assert notifier.listener_count == 0
