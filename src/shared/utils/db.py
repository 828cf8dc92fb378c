from shared.database import Database


def setup_db(database: Database):
    """Setup database schema"""
    database.create_all()


def drop_db(database: Database):
    """Drop database schema"""
    database.drop_all()
