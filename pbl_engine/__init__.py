"""项目式学习进度与计分引擎。"""
