#!/usr/bin/env python3
"""Create the update center tables"""
from update_center.database.session import engine, Base
from update_center.models.app_version import AppVersion, AppVersionPackage  # noqa: F401


def init_db():
    print("Creating tables...")
    Base.metadata.create_all(bind=engine)
    print("Tables created")


if __name__ == "__main__":
    init_db()
