from admind.routers import ads, dashboard, meetings, profile

__all__ = [
    "ads",
    "dashboard",
    "meetings",
    "profile",
]
