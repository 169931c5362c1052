"""用户界面模块."""
