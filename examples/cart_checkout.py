from zderive import create_simple_store, derive

# Two source stores for a shopping cart
item_count = create_simple_store(1)
price_per_item = create_simple_store(10.0)


def update_ui(total: float, prev_total: float):
    print(f">>> Cart Total: ${total:.2f} (was ${prev_total:.2f})")


# total_price is recomputed whenever either source changes
total_price = derive(
    [item_count, price_per_item],
    lambda deps, prev_deps, prev_state: deps[0] * deps[1],
    name="total_price",
)
total_price.subscribe(update_ui)

print("=" * 50)

item_count.set_state(2)
price_per_item.set_state(15)

# ==================================================
# >>> Cart Total: $20.00 (was $10.00)
# >>> Cart Total: $30.00 (was $20.00)
