CSS_LOG = """
body {
    background: #1e1e1e;
    color: #e0e0e0;
    font-family: 'DejaVu Sans', 'Helvetica Neue', sans-serif;
}

.content {
    max-width: 1200px;
    margin: 0 auto;
    padding: 1em 2em;
}

.section {
    margin: 2em 0;
    padding: 1em;
    background: #2d2d2d;
    border-radius: 4px;
}

.section h4 {
    color: #61afef;
    margin: 1em 0 0.3em;
}

.info {
    margin: 0.3em 0;
}

.error {
    color: #ff8080;
    font-weight: bold;
}

.table-container pre {
    font-family: 'Menlo', 'DejaVu Sans Mono', monospace;
    font-size: 0.9em;
    color: #98c379;
}
"""
