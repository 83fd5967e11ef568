#!/usr/bin/env python3

import sys
import pandas
import statsmodels.formula.api as statsmodels

MODEL = 'time ~ I(size**3)'

def get_reg(dataframe):
    reg = statsmodels.ols(formula=MODEL, data=dataframe).fit()
    if reg.rsquared < 0.95:
        print('WARNING: bad R-squared, got %f.' % reg.rsquared)
    return reg

if __name__ == '__main__':
    if len(sys.argv) != 2:
        print('Syntax: %s <file_name>' % sys.argv[0])
        sys.exit(1)
    reg = get_reg(pandas.read_csv(sys.argv[1]))
    print(reg.params)
