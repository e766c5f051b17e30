#
# gctester
#
# harness that checks a generational collector starts old cycles on growth
#
