"""Shape probes: traversal, redaction, simplification and outlining."""
from shapeql.probe.traverser import Probe, Traverser, Transformer
from shapeql.probe.inspector import all_of, any_of, min_count_of
from shapeql.probe.redactor import ModeRedactor, Redactor, redact, redact_mode
from shapeql.probe.optimizer import Optimizer, optimize
from shapeql.probe.pruner import Pruner, prune
from shapeql.probe.outliner import Outliner, outline
