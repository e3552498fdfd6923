from household_budget.config import Settings
from household_budget.container import Container, get_container, reset_container
from household_budget.domain.value_objects import Currency


class TestContainer:
    def test_services_share_one_database(self):
        with Container(Settings(sqlite_path=":memory:")) as container:
            user = container.identity_service.register("joci@demo.hu", "123")
            household = container.household_service.create_household(
                "Otthon", user.id
            )

            entries = container.audit_service.get_audit_logs(household.id)

        assert [e.household_id for e in entries] == [household.id]

    def test_default_currency_comes_from_settings(self):
        settings = Settings(sqlite_path=":memory:", default_currency=Currency.EUR)

        with Container(settings) as container:
            user = container.identity_service.register("joci@demo.hu", "123")
            household = container.household_service.create_household(
                "Otthon", user.id
            )

        assert household.currency == Currency.EUR

    def test_scheduler_respects_feature_flag(self):
        settings = Settings(sqlite_path=":memory:", enable_auto_payments=False)

        with Container(settings) as container:
            assert container.autopay_scheduler.enabled is False

    def test_close_without_database_is_noop(self):
        container = Container(Settings(sqlite_path=":memory:"))

        container.close()

        assert "database" not in container.__dict__


class TestGlobalContainer:
    def test_reset_builds_a_new_container(self):
        first = get_container()
        reset_container()

        try:
            assert get_container() is not first
        finally:
            reset_container()
