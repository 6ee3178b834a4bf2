"""pkgscope - terminal dashboard for APT, Snap, Flatpak and AppImage packages."""

__version__ = "0.3.0"
