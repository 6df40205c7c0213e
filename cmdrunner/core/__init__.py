# ═══════════════════════════════════════════════════════════════
# cmdrunner - Core
# Configuration, logging and the error taxonomy
# ═══════════════════════════════════════════════════════════════
