"""Student CRUD Package"""
