# plugins/__init__.py
# 内置插件目录，随项目一起安装
