"""
https://python-dependency-injector.ets-labs.org/index.html
https://python-dependency-injector.ets-labs.org/examples/fastapi-sqlalchemy.html
"""

from dependency_injector import containers, providers

from src.platform.config.core_setting import Settings
from src.platform.database.orm_db_setting import Database
from src.platform.database.unit_of_work import SqlAlchemyUnitOfWork
from src.service.surprise_box.domain.reservation_policy import ReservationPolicy, utc_now
from src.service.surprise_box.driven_adapter.repo.order_query_repo_impl import OrderQueryRepoImpl


class Container(containers.DeclarativeContainer):
    # Configuration
    config_service = providers.Singleton(Settings)

    # Database (event-loop-aware engine, one session per unit of work)
    database = providers.Singleton(Database)

    # "now" for every ledger call; tests override with a controllable clock
    clock = providers.Object(utc_now)

    reservation_policy = providers.Singleton(
        ReservationPolicy,
        default_minutes=config_service.provided.RESERVATION_DEFAULT_MINUTES,
        max_minutes=config_service.provided.RESERVATION_MAX_MINUTES,
    )

    # New UoW per resolution: a UoW holds the session of one in-flight request
    unit_of_work = providers.Factory(
        SqlAlchemyUnitOfWork, session_factory=database.provided.session_factory
    )

    # Repositories (stateless - use session_factory per call)
    order_query_repo = providers.Singleton(
        OrderQueryRepoImpl, session_factory=database.provided.session
    )


container = Container()


def setup() -> None:
    container.config_service()
    container.database()


def cleanup() -> None:
    container.reset_singletons()
