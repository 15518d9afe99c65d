import json
import pprint
from typing import Iterable

import deepdiff


def assert_equals(d1: dict | Iterable, d2: dict | Iterable):
    assert d1 == d2, pprint.pprint(deepdiff.DeepDiff(d1, d2))


def load_properties(raw: str | bytes | None) -> dict:
    assert raw is not None
    return json.loads(raw)
