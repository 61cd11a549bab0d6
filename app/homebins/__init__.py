"""homebins - install binaries to $HOME.

Installs precompiled binaries, manpages, shell completions and systemd user
units from declarative manifests, without root and without an installation
database.
"""

__version__ = "0.1.0"
