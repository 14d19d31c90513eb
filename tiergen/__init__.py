"""
TierGen: generates a layered DTO/DAL/BLL/console C# solution from a database schema.
"""
__version__ = "1.0.0"
