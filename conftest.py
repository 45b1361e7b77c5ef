import os

import matplotlib

os.environ["HEAT_FTCS_USETEX"] = "no"
matplotlib.use("Agg")
