# codecat

`codecat` gathers the source files of a project into a single text stream.
Each file is wrapped in marker lines that carry its path relative to the
current working directory. You can paste the result into a review tool or an
assistant. Alongside the stream it prints a summary tree of what was included,
which files were empty and which could not be read.

## Installation

```
pip install .
```

## Usage

```
codecat [target_directory] [flags]
codecat [flags]
```

- `codecat` scans the current directory.
- `codecat src` scans only `src`. It cannot be combined with `-d`, and at most one positional directory is accepted.
- `codecat -d src,tests` scans several directories (comma separated).
- `codecat -n -f README.md,setup.cfg` skips scanning and includes only the named files.

### Flags

| Flag | Meaning |
| --- | --- |
| `-d, --directory` | Directories to scan, comma separated. |
| `-e, --extensions` | Extensions to include, comma separated; overrides the config. |
| `-f, --files` | Files to include regardless of any exclude rule. |
| `-x, --exclude` | CWD-relative glob patterns to exclude. |
| `--no-gitignore` | Do not apply `.gitignore` / `.ignore` rules. |
| `--loglevel` | `debug`, `info`, `warn` (default) or `error`. |
| `-o, --output` | Write code to a file; summary and logs then go to stdout. |
| `-c, --config` | Use a custom config file. |
| `-v, --version` | Print the version and exit. |
| `-n, --no-scan` | Skip scanning; requires `-f`. |

You can repeat `-e`, `-f` and `-x`, or give them comma-separated lists.

By default the code goes to stdout, and the summary and logs go to stderr.
The exit status is 1 in two cases: a file or scan directory could not be
processed, or the command line or configuration is invalid.

With `--loglevel debug`, the summary tree marks files that were named with
`-f` by adding ` [M]`.

### Output format

The output starts with the configured header. Each file then follows as one
block:

```
----- Codebase for analysis -----
--- src/app.py
print("hello")
---
```

## What gets scanned

- Files are taken from the scan directories, depth first and in name order.
- Entries whose names begin with `.` are always skipped.
- Only files whose extension is in the include list are taken. Matching ignores case.
- When gitignore handling is on, the scan honours `.gitignore` and `.ignore` files in each directory. Negated (`!`) patterns are supported.
- Empty files are not written to the output. The summary lists them.

## Exclusion rules

The rules apply in this order:

1. Basename patterns from the config (`exclude_basenames`). They are matched
   against the name of every file and directory.
2. CWD-relative patterns from a `.codecat_exclude` file in the current
   directory, one per line. Blank lines and `#` comments are skipped.
3. CWD-relative patterns given with `-x`.
4. `.gitignore` rules, when enabled.

In patterns, `*` and `?` never match `/`. The patterns support `[...]`
classes and backslash escapes. Malformed patterns are skipped with a warning.

A directory that is excluded excludes everything below it. A CWD-relative
pattern such as `data` also excludes everything under `data/`. Files named
with `-f` bypass all of these rules.

## Configuration

The config is read from `~/.config/codecat/config.toml`, or from the path
given with `-c`. If the default file is missing, unreadable or malformed,
the defaults are used. A custom file with any of these problems is an error.
Keys that are not set keep their defaults. A key of the wrong type in a
custom file is an error. Unknown keys are reported as a warning.

```toml
include_extensions = ["py", "json", "sh", "txt", "rst", "md", "go", "mod", "sum", "yaml", "yml"]
exclude_basenames = ["*.log", "*.pyc", ".git", "__pycache__", "node_modules", "venv", "build", "dist"]
comment_marker = "---"
header_text = "----- Codebase for analysis -----\n"
use_gitignore = true
```

## Library use

- `codecat.walk.generate_concatenated_code` does the work behind the command.
  It returns a `codecat.summary.ConcatResult` with these fields:
  - `output`
  - `included_files`
  - `empty_files`
  - `error_files`
  - `total_size`
  - `error`, the first scan-level error
- `codecat.summary.write_summary(result, cwd, stream)` prints the summary for such a result.
- `codecat.summary.format_summary` returns the summary as a string.
- `codecat.config.load_config` returns a `Config` and raises `ConfigError` for a bad custom file.
- `codecat.helpers.process_extensions` normalises extension lists such as `["py", ".TXT, md"]`.
- `codecat.helpers.format_bytes` formats sizes such as `1.5 KiB`.