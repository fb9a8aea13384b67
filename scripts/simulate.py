"""
Festival Rush Simulation Script

Simulates a burst of customers ordering at the same time, followed by stall
owners racing to update the same orders. Needs a running, seeded server.
Run from project root: python scripts/simulate.py

Author: Festival Stalls Team
Version: 1.0.0
"""

import argparse
import asyncio
import random
import sys
import time
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import httpx

API_BASE_URL = "http://localhost:3001"
TOTAL_ORDERS = 50
STATUSES = ["pending", "preparing", "ready", "completed"]

FIRST_NAMES = ["John", "Jane", "Mike", "Sarah", "Tom", "Emma", "David", "Lisa", "Chris", "Amy"]
LAST_NAMES = ["Smith", "Johnson", "Williams", "Brown", "Jones", "Garcia", "Miller", "Davis", "Wilson", "Taylor"]


def generate_random_customer() -> dict[str, str]:
    """Generate random customer info."""
    first = random.choice(FIRST_NAMES)
    last = random.choice(LAST_NAMES)
    return {
        "customer_name": f"{first} {last}",
        "customer_email": f"{first.lower()}.{last.lower()}@example.com",
        "customer_phone": f"555-{random.randint(100, 999)}-{random.randint(1000, 9999)}",
    }


def generate_order_payload(stall_id: str, menu: list[dict[str, Any]]) -> dict[str, Any]:
    """Build a POST /api/orders body from a stall's menu."""
    items = []
    for menu_item in random.sample(menu, k=random.randint(1, min(3, len(menu)))):
        items.append({
            "menu_item_id": menu_item["_id"],
            "quantity": random.randint(1, 3),
            "price": menu_item["price"],
            "item_name": menu_item["name"],
        })
    pickup = datetime.now(timezone.utc) + timedelta(minutes=random.randint(10, 90))

    return {
        "stall_id": stall_id,
        **generate_random_customer(),
        "pickup_time": pickup.isoformat(),
        "total_amount": round(sum(i["quantity"] * i["price"] for i in items), 2),
        "items": items,
    }


async def timed(coro) -> tuple[Optional[httpx.Response], float, Optional[str]]:
    start_time = time.time()
    try:
        response = await coro
        return response, round(time.time() - start_time, 3), None
    except Exception as e:
        return None, round(time.time() - start_time, 3), str(e)[:100]


async def place_order(client: httpx.AsyncClient, order_num: int, payload: dict[str, Any]) -> dict[str, Any]:
    """Send one order."""
    response, elapsed, error = await timed(
        client.post(f"{API_BASE_URL}/api/orders", json=payload, timeout=30.0)
    )
    if response is not None and response.status_code == 200:
        return {
            "order_num": order_num,
            "success": True,
            "order_id": response.json().get("orderId"),
            "total": payload["total_amount"],
            "time": elapsed,
        }
    return {
        "order_num": order_num,
        "success": False,
        "error": error or response.text[:100],
        "time": elapsed,
    }


async def update_status(client: httpx.AsyncClient, order_id: str, status: str) -> dict[str, Any]:
    """Send one status update."""
    response, elapsed, error = await timed(
        client.patch(f"{API_BASE_URL}/api/orders/{order_id}", json={"status": status}, timeout=30.0)
    )
    ok = response is not None and response.status_code == 200
    return {
        "order_id": order_id,
        "status": status,
        "success": ok,
        "error": None if ok else (error or response.text[:100]),
        "time": elapsed,
    }


def print_timings(label: str, results: list[dict[str, Any]]) -> None:
    successful = [r for r in results if r["success"]]
    print(f"\n{label}: {len(successful)}/{len(results)} successful")
    if successful:
        times = [r["time"] for r in successful]
        print(f"   Average Response: {round(sum(times) / len(times), 3)}s")
        print(f"   Fastest: {min(times)}s")
        print(f"   Slowest: {max(times)}s")
    for f in [r for r in results if not r["success"]][:5]:
        print(f"   ⚠️  {f.get('error', 'Unknown error')}")


async def run_simulation(
    num_orders: int = TOTAL_ORDERS,
    stall_id: Optional[str] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> dict[str, Any]:
    """
    Run the rush simulation.

    Args:
        num_orders: Number of orders to place concurrently
        stall_id: Order only from this stall (default: random stalls)
        transport: httpx transport override (tests run against the ASGI app)
    """
    print("=" * 70)
    print("🔥 FESTIVAL RUSH SIMULATION")
    print("=" * 70)
    print(f"📋 Total Orders: {num_orders}")
    print(f"🎯 Target: {API_BASE_URL}")
    print(f"⏰ Started: {datetime.now().strftime('%H:%M:%S')}")
    print("=" * 70)

    async with httpx.AsyncClient(transport=transport) as client:
        stalls = (await client.get(f"{API_BASE_URL}/api/stalls")).json()
        if stall_id:
            stalls = [s for s in stalls if s["_id"] == stall_id]
        menus = {}
        for stall in stalls:
            menu = (await client.get(f"{API_BASE_URL}/api/menu/{stall['_id']}")).json()
            if menu:
                menus[stall["_id"]] = menu
        if not menus:
            print("\n❌ No stalls with menus found. Seed first: python scripts/seed.py")
            return {"total": num_orders, "successful": 0, "failed": num_orders}

        print("\n🚀 Placing orders...\n")
        start_time = time.time()
        tasks = []
        for i in range(num_orders):
            chosen = random.choice(list(menus))
            tasks.append(place_order(client, i + 1, generate_order_payload(chosen, menus[chosen])))
        order_results = await asyncio.gather(*tasks)

        # Two owners update each placed order at the same moment
        print("🚀 Racing status updates...\n")
        placed = [r["order_id"] for r in order_results if r["success"]]
        update_tasks = []
        for order_id in placed:
            for status in random.sample(STATUSES[1:], k=2):
                update_tasks.append(update_status(client, order_id, status))
        update_results = await asyncio.gather(*update_tasks)
        total_time = round(time.time() - start_time, 2)

    successful = [r for r in order_results if r["success"]]

    print("=" * 70)
    print("📊 SIMULATION RESULTS")
    print("=" * 70)
    print_timings("🧾 Orders", order_results)
    print_timings("🔄 Status Updates", update_results)
    print(f"\n💰 Total Ordered: ${sum(r['total'] for r in successful):.2f}")
    print(f"⏱️  Total Time: {total_time}s")
    print(f"\n🔍 Inspect the results at {API_BASE_URL}/")
    print("=" * 70)

    return {
        "total": num_orders,
        "successful": len(successful),
        "failed": num_orders - len(successful),
        "total_time": total_time,
        "results": order_results,
    }


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Festival Rush Simulation")
    parser.add_argument("--orders", type=int, default=TOTAL_ORDERS, help="Number of orders")
    parser.add_argument("--stall", default=None, help="Only order from this stall id")
    parser.add_argument("--url", default=API_BASE_URL, help="API base URL")
    args = parser.parse_args()

    API_BASE_URL = args.url
    summary = asyncio.run(run_simulation(args.orders, args.stall))
    sys.exit(0 if summary["failed"] == 0 else 1)
