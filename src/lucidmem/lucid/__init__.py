"""Client side of the ``lucid`` distributed context tool.

``protocol`` parses its text output, ``process`` runs it as a subprocess.
"""
