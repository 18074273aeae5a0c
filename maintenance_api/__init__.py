"""A400 maintenance data service and squadron chat assistant."""
