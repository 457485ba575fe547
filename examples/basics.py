"""
Walkthrough of the zderive building blocks:

- simple and object stores
- deriving a store from several sources
- prev_deps_state / prev_state inside on_change
- read-only derived stores and dispose()
"""

import logging

from zderive import (
    ReadOnlyStoreError,
    create_object_store,
    create_simple_store,
    derive,
)

logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

# Base stores
first_name = create_simple_store("Ada")
profile = create_object_store({"last_name": "Lovelace", "age": 36})

# A derived store reading both
full_name = derive(
    [first_name, profile],
    lambda deps, prev_deps, prev_state: f"{deps[0]} {deps[1]['last_name']}",
    name="full_name",
)
print(full_name.get_state())  # Ada Lovelace

full_name.subscribe(lambda state, prev: print(f"renamed: {prev} -> {state}"))
first_name.set_state("Augusta")  # renamed: Ada Lovelace -> Augusta Lovelace

# on_change can look at what changed since the previous update
def birthdays(deps, prev_deps, prev_state):
    if prev_deps is None:
        return 0
    return prev_state + (deps[0]["age"] > prev_deps[0]["age"])


birthday_count = derive([profile], birthdays, name="birthdays")
profile.set_state(lambda state: {"age": state["age"] + 1})
profile.set_state({"last_name": "King"})
print(birthday_count.get_state())  # 1

# Derived stores cannot be written to
try:
    full_name.set_state("someone else")
except ReadOnlyStoreError as e:
    print(f"refused: {e}")

# Detach from the sources; the last value stays readable
full_name.dispose()
first_name.set_state("Ada")
print(full_name.get_state())  # Augusta King
