"""Formal pipeline invariants.

This file documents what each stage MUST produce. This is architecture, not code.
Use this file as a reviewer anchor and system reference.
"""

PIPELINE_INVARIANTS = {
    "ingest": [
        "Header written exactly once, before any cell",
        "Feature vector length <= header feature count (short rows warn)",
        "Cell id from id_col when set, otherwise the zero-based line counter",
    ],

    "cut": [
        "Only included feature columns remain, in original relative order",
        "Non-feature tags untouched",
        "Provenance appended only when a column was removed (idempotent)",
    ],

    "clean": [
        "Graph, meta and feature tags dropped wholesale per switch",
        "Dropping features empties every cell vector",
    ],

    "pheno": [
        "Every gate marker resolved before the first cell",
        "Gate bit = declaration order; bits only ever ORed into pflag",
        "No cell dropped",
    ],

    "select": [
        "Kept iff AND bits all set and (OR mask zero or any OR bit set), XOR invert",
        "Cells forwarded unchanged",
    ],

    "count": [
        "Cells forwarded unchanged",
        "Total reported once after stream end",
    ],

    "log": [
        "Designated columns log10-transformed in place",
        "Non-positive values passed through, first one warned once",
    ],

    "roi": [
        "Half-open ray-crossing containment",
        "label mode sets ROI_FLAG and keeps every cell, otherwise drops outsiders",
    ],

    "view": [
        "Header line precedes all cell lines",
        "header_only stops the pipeline before any cell is read",
    ],

    "build": [
        "Graph tag present exactly once",
        "Graph snapshot covers every forwarded cell, in order",
    ],

    "cat": [
        "One master header emitted",
        "Later headers have identical feature columns",
        "Sample ids of distinct streams are disjoint after the shift",
        "Global and intra-stream order preserved",
    ],

    "radial": [
        "One feature column appended per band",
        "Counts exclude the subject and use inner < d < outer",
        "Parallel classification equals serial classification",
    ],
}

# Which stages may change the header shape
SCHEMA_MUTATING = {
    "cut": True,
    "clean": True,
    "radial": True,
    "build": True,   # adds a graph tag, no vector change
    "cat": False,
    "pheno": False,
    "select": False,
    "count": False,
    "log": False,
    "roi": False,
    "view": False,
}
