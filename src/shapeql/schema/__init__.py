"""Shape algebra, query model and validation trace."""
from shapeql.schema.common import Step, parse_path, format_path
from shapeql.schema.shape import Shape, And, Or, When, Field, Guard, Meta
from shapeql.schema.query import Order, Edges, Stats, Items, parse_order, format_order
from shapeql.schema.trace import Trace
