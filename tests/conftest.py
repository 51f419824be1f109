from datetime import time

import pytest

from scheduler.models import ScheduledClass


def make_class(name="Math", day=1, start="09:00", end="10:00", week=1, **kwargs) -> ScheduledClass:
    sh, sm = (int(x) for x in start.split(":"))
    eh, em = (int(x) for x in end.split(":"))
    return ScheduledClass(
        name=name,
        day_of_week=day,
        week_index=week,
        start_time=time(sh, sm),
        end_time=time(eh, em),
        **kwargs,
    )


@pytest.fixture
def class_factory():
    return make_class
