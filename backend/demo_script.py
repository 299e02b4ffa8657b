#!/usr/bin/env python3
"""
Station Tracker Demo Script
Walks a running API through the warehouse scenarios
"""

import asyncio
import sys
from typing import Any, Dict, Optional

import httpx


class StationTrackerDemo:
    """Demo client for the station tracker API"""

    def __init__(self, base_url: str = "http://localhost:8000", employee: str = "Demo"):
        self.base_url = base_url
        self.employee = employee
        self.client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self):
        self.client = httpx.AsyncClient(base_url=self.base_url, headers={"X-Employee": self.employee}, timeout=15)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self.client:
            await self.client.aclose()

    async def check_system_status(self) -> bool:
        """Check if the API is running"""
        try:
            response = await self.client.get("/inventory")
        except httpx.RequestError as e:
            print(f"❌ Cannot connect to system: {e}")
            return False
        if response.status_code != 200:
            print(f"❌ System not responding: {response.status_code}")
            return False
        data = response.json()
        print(f"✅ System Status: {data['inventory_count']} units in stock, {data['active_stations']} active stations")
        return True

    async def set_inventory(self, count: int):
        response = await self.client.put("/inventory", json={"count": count})
        print(f"📦 Stock set to {response.json()['inventory_count']}")

    async def create_station(self, location_name: str, address: str) -> Optional[Dict[str, Any]]:
        response = await self.client.post("/stations", json={
            "locationName": location_name,
            "address": address,
            "status": "Запланировано",
        })
        if response.status_code == 201:
            data = response.json()
            print(f"➕ {data['message']} (stock: {data['inventory_count']})")
            return data["station"]
        print(f"⛔ Create refused ({response.status_code}): {response.json()['detail']}")
        return None

    async def change_status(self, station_id: str, status: str):
        response = await self.client.post(f"/stations/{station_id}/status", json={"status": status})
        if response.status_code == 200:
            data = response.json()
            print(f"🔁 {station_id} -> {status} (stock: {data['inventory_count']})")
            latest = data["station"]["history"][0]
            print(f"   📝 {latest['employee']}: {latest['change']}")
        else:
            print(f"⛔ Status change refused ({response.status_code}): {response.json()['detail']}")

    async def demo_warehouse_limits(self):
        """Single unit in stock: second station is refused until the first is removed"""
        print("\n" + "=" * 60)
        print("🎭 DEMO: Warehouse limits")
        print("=" * 60)

        await self.set_inventory(1)
        first = await self.create_station("Demo Cafe", "ул. Абая, 10, Алматы")
        await self.create_station("Demo Gym", "ул. Сатпаева, 5, Алматы")
        if first:
            await self.change_status(first["id"], "Удалено")
            await self.change_status(first["id"], "Установлено")

    async def demo_export(self):
        print("\n" + "=" * 60)
        print("🎭 DEMO: CSV export")
        print("=" * 60)
        response = await self.client.post("/export", json={})
        if response.status_code == 200:
            disposition = response.headers.get("content-disposition", "")
            lines = response.text.splitlines()
            print(f"📄 {disposition} ({len(lines) - 1} rows)")
        else:
            print(f"❌ Export failed: {response.json()['detail']}")

    async def run_all_demos(self):
        print("🚀 Starting Station Tracker demo")
        if not await self.check_system_status():
            print("❌ System not ready. Please start rest_api.py first.")
            return
        await self.demo_warehouse_limits()
        await self.demo_export()
        print("\n🎉 Demo completed!")


async def main():
    base_url = sys.argv[1] if len(sys.argv) > 1 else "http://localhost:8000"
    async with StationTrackerDemo(base_url) as demo:
        await demo.run_all_demos()

if __name__ == "__main__":
    asyncio.run(main())
