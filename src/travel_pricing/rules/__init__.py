"""Rules subpackage - CSV rule authoring and compilation."""
