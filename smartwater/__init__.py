"""SmartWater Pools backend"""
