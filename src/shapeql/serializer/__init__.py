"""Serializers for shapes and validation traces."""
from shapeql.serializer.json_serializer import serialize_json, serialize_trace, shape_to_dict
