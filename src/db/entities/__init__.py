"""
ORM сущности.

Модули отсюда не импортируются явно: их находит load_entities
по шаблону ConnectionDescriptor.entity_locations.
"""
