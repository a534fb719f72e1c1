from .scan import CountExecutor, ScanState, make_scan_input, not_empty_object, primitives_to_string

__all__ = ['CountExecutor', 'ScanState', 'make_scan_input', 'not_empty_object', 'primitives_to_string']
